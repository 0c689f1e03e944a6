"""
SQLAlchemy ORM models
"""
import uuid
from datetime import date as date_type, datetime, timezone

from sqlalchemy import String, Integer, Date, TIMESTAMP, Uuid, Index, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from subtracker.infrastructure.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionModel(Base):
    """User subscription to a paid service, priced per calendar month"""
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    service_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # minor units per month
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Always the 1st of a month
    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    end_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)  # NULL = open-ended

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, onupdate=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_subscriptions_user_service", "user_id", "service_name"),
        CheckConstraint("price > 0", name="ck_subscriptions_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, service_name={self.service_name}, user_id={self.user_id})>"
