"""
Subscription Repository - persistence of subscriptions and the cost aggregation query
"""
import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from subtracker.domain.subscription import (
    SubscriptionNotFoundError,
    SubscriptionPatch,
    SubscriptionStoreError,
    total_cost,
    validate_month_range,
)
from subtracker.infrastructure.db.models import SubscriptionModel

logger = logging.getLogger(__name__)


class SubscriptionRepository:
    """
    Repository для таблицы subscriptions

    Ошибки SQLAlchemy откатывают сессию и пробрасываются как SubscriptionStoreError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> SubscriptionStoreError:
        self.db.rollback()
        logger.error(f"subscription store failure during {action}: {exc}")
        return SubscriptionStoreError(f"failed to {action} subscription")

    def create(self, subscription: SubscriptionModel) -> SubscriptionModel:
        try:
            self.db.add(subscription)
            self.db.commit()
            self.db.refresh(subscription)
        except SQLAlchemyError as e:
            raise self._fail("create", e) from e
        return subscription

    def get_by_id(self, subscription_id: uuid.UUID) -> SubscriptionModel:
        """
        Raises:
            SubscriptionNotFoundError: если записи нет
        """
        try:
            sub = self.db.get(SubscriptionModel, subscription_id)
        except SQLAlchemyError as e:
            raise self._fail("read", e) from e
        if sub is None:
            raise SubscriptionNotFoundError(subscription_id)
        return sub

    def update(self, subscription: SubscriptionModel, patch: SubscriptionPatch) -> SubscriptionModel:
        """Apply a partial update to a loaded subscription and persist it"""
        patch.apply(subscription)
        try:
            self.db.commit()
            self.db.refresh(subscription)
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e
        return subscription

    def delete_by_id(self, subscription_id: uuid.UUID) -> None:
        """
        Hard delete

        Raises:
            SubscriptionNotFoundError: если удалять нечего
        """
        try:
            deleted = self.db.query(SubscriptionModel).filter(
                SubscriptionModel.id == subscription_id,
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e
        if deleted == 0:
            raise SubscriptionNotFoundError(subscription_id)

    def list(
        self,
        user_id: Optional[uuid.UUID] = None,
        service_name: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[SubscriptionModel]:
        """Newest first, optional filters by user and exact service name"""
        stmt = select(SubscriptionModel)
        if user_id is not None:
            stmt = stmt.where(SubscriptionModel.user_id == user_id)
        if service_name:
            stmt = stmt.where(SubscriptionModel.service_name == service_name)
        stmt = stmt.order_by(SubscriptionModel.created_at.desc()).limit(limit).offset(offset)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._fail("list", e) from e

    def list_overlapping(
        self,
        user_id: uuid.UUID,
        service_name: Optional[str],
        from_month: date,
        to_month: date,
    ) -> List[SubscriptionModel]:
        """
        Subscriptions of a user active in at least one month of [from_month, to_month]

        Бессрочная подписка (end_date IS NULL) считается активной до to_month.
        """
        stmt = select(SubscriptionModel).where(
            SubscriptionModel.user_id == user_id,
            SubscriptionModel.start_date <= to_month,
            or_(
                SubscriptionModel.end_date.is_(None),
                SubscriptionModel.end_date >= from_month,
            ),
        )
        if service_name:
            stmt = stmt.where(SubscriptionModel.service_name == service_name)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._fail("aggregate", e) from e

    def aggregate_total(
        self,
        user_id: uuid.UUID,
        service_name: Optional[str],
        from_month: date,
        to_month: date,
    ) -> int:
        """
        Total cost of matching subscriptions over the inclusive month range

        Raises:
            SubscriptionValidationError: если from_month > to_month
        """
        validate_month_range(from_month, to_month)
        rows = self.list_overlapping(user_id, service_name, from_month, to_month)
        return total_cost(rows, from_month, to_month)
