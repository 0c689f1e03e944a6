"""
Subscription use cases: CRUD подписок + расчёт суммарной стоимости за период.

Модуль работает напрямую с ORM через SubscriptionRepository.
"""
import logging
import uuid
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from subtracker.domain.months import format_year_month
from subtracker.domain.subscription import (
    UNSET,
    SubscriptionNotFoundError,
    SubscriptionPatch,
    SubscriptionStoreError,
    SubscriptionValidationError,
)
from subtracker.infrastructure.db.models import SubscriptionModel
from subtracker.infrastructure.subscriptions.repository import SubscriptionRepository
from subtracker.utils.validation import (
    parse_int,
    validate_price,
    validate_service_name,
    validate_uuid,
    validate_year_month,
)

__all__ = [
    "CreateSubscriptionUseCase", "GetSubscriptionUseCase", "UpdateSubscriptionUseCase",
    "DeleteSubscriptionUseCase", "ListSubscriptionsUseCase", "ComputeTotalCostUseCase",
    "SubscriptionValidationError", "SubscriptionNotFoundError", "SubscriptionStoreError",
    "DEFAULT_LIMIT", "DEFAULT_OFFSET",
]

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0

UPDATABLE_FIELDS = ("service_name", "price", "start_date", "end_date")


def _check_date_order(start: date, end: date | None, enforce: bool) -> None:
    """end_date < start_date: предупреждение или ошибка (ENFORCE_END_AFTER_START)"""
    if end is None or end >= start:
        return
    if enforce:
        raise SubscriptionValidationError("end_date must be >= start_date")
    logger.warning(
        f"subscription end_date {format_year_month(end)} is before "
        f"start_date {format_year_month(start)}; it will not add to any total"
    )


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, db: Session, enforce_end_after_start: bool = False):
        self.repo = SubscriptionRepository(db)
        self.enforce_end_after_start = enforce_end_after_start

    def execute(
        self,
        service_name: str,
        price: int,
        user_id: str,
        start_date: str,
        end_date: str | None = None,
    ) -> SubscriptionModel:
        """
        Создать подписку

        Args:
            service_name: Название сервиса (непустое)
            price: Стоимость в месяц (целое > 0)
            user_id: UUID пользователя строкой
            start_date: Первый месяц, YYYY-MM
            end_date: Последний месяц включительно, YYYY-MM (None или "" = бессрочно)

        Returns:
            Созданная подписка
        """
        name = validate_service_name(service_name)
        price = validate_price(price)
        uid = validate_uuid(user_id, "user_id")
        start = validate_year_month(start_date, "start_date")
        end = validate_year_month(end_date, "end_date") if end_date else None
        _check_date_order(start, end, self.enforce_end_after_start)

        sub = self.repo.create(SubscriptionModel(
            id=uuid.uuid4(),
            service_name=name,
            price=price,
            user_id=uid,
            start_date=start,
            end_date=end,
        ))
        logger.info(f"subscription created id={sub.id} user_id={sub.user_id}")
        return sub


class GetSubscriptionUseCase:
    def __init__(self, db: Session):
        self.repo = SubscriptionRepository(db)

    def execute(self, subscription_id: str | uuid.UUID) -> SubscriptionModel:
        sid = validate_uuid(str(subscription_id), "id")
        return self.repo.get_by_id(sid)


class UpdateSubscriptionUseCase:
    """
    Частичное обновление: переданы только изменяемые поля.

    end_date="" очищает дату окончания, отсутствие ключа оставляет её как есть.
    user_id и id не меняются.
    """

    def __init__(self, db: Session, enforce_end_after_start: bool = False):
        self.repo = SubscriptionRepository(db)
        self.enforce_end_after_start = enforce_end_after_start

    def build_patch(self, changes: dict[str, Any]) -> SubscriptionPatch:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise SubscriptionValidationError(f"unknown fields: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = {}
        if "service_name" in changes:
            values["service_name"] = validate_service_name(changes["service_name"])
        if "price" in changes:
            values["price"] = validate_price(changes["price"])
        if "start_date" in changes:
            values["start_date"] = validate_year_month(changes["start_date"], "start_date")
        if "end_date" in changes:
            raw = changes["end_date"]
            values["end_date"] = None if raw == "" else validate_year_month(raw, "end_date")
        return SubscriptionPatch(**values)

    def execute(self, subscription_id: str | uuid.UUID, **changes) -> SubscriptionModel:
        sid = validate_uuid(str(subscription_id), "id")
        sub = self.repo.get_by_id(sid)

        patch = self.build_patch(changes)
        start = patch.start_date if patch.start_date is not UNSET else sub.start_date
        end = patch.end_date if patch.end_date is not UNSET else sub.end_date
        _check_date_order(start, end, self.enforce_end_after_start)

        if patch.is_empty():
            return sub

        sub = self.repo.update(sub, patch)
        logger.info(f"subscription updated id={sub.id} fields={sorted(patch.changes())}")
        return sub


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session):
        self.repo = SubscriptionRepository(db)

    def execute(self, subscription_id: str | uuid.UUID) -> None:
        sid = validate_uuid(str(subscription_id), "id")
        self.repo.delete_by_id(sid)
        logger.info(f"subscription deleted id={sid}")


class ListSubscriptionsUseCase:
    def __init__(self, db: Session):
        self.repo = SubscriptionRepository(db)

    def execute(
        self,
        user_id: str | None = None,
        service_name: str | None = None,
        limit: str | int | None = None,
        offset: str | int | None = None,
    ) -> list[SubscriptionModel]:
        uid = validate_uuid(user_id, "user_id") if user_id else None
        return self.repo.list(
            user_id=uid,
            service_name=service_name or None,
            limit=parse_int(None if limit is None else str(limit), DEFAULT_LIMIT),
            offset=parse_int(None if offset is None else str(offset), DEFAULT_OFFSET),
        )


# ============================================================================
# Total cost
# ============================================================================


class ComputeTotalCostUseCase:
    """
    Суммарная стоимость подписок пользователя за период [from, to] (YYYY-MM, включительно)
    """

    def __init__(self, db: Session):
        self.repo = SubscriptionRepository(db)

    def execute(
        self,
        user_id: str | None,
        from_month: str | None,
        to_month: str | None,
        service_name: str | None = None,
    ) -> int:
        if not user_id:
            raise SubscriptionValidationError("user_id required")
        if not from_month or not to_month:
            raise SubscriptionValidationError("from and to required (YYYY-MM)")
        uid = validate_uuid(user_id, "user_id")
        start = validate_year_month(from_month, "from")
        end = validate_year_month(to_month, "to")

        total = self.repo.aggregate_total(uid, service_name or None, start, end)
        logger.debug(
            f"total for user_id={uid} service={service_name or '*'} "
            f"{from_month}..{to_month}: {total}"
        )
        return total
