"""
Subscription API endpoints
"""
import uuid
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, StrictInt
from sqlalchemy.orm import Session

from subtracker.api.deps import get_app_settings, get_db
from subtracker.application.subscriptions import (
    ComputeTotalCostUseCase,
    CreateSubscriptionUseCase,
    DeleteSubscriptionUseCase,
    GetSubscriptionUseCase,
    ListSubscriptionsUseCase,
    UpdateSubscriptionUseCase,
)
from subtracker.config import Settings


router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class CreateSubscriptionRequest(BaseModel):
    service_name: str = ""
    price: StrictInt = 0
    user_id: str = ""
    start_date: str = ""  # YYYY-MM
    end_date: str | None = None  # YYYY-MM, optional


class UpdateSubscriptionRequest(BaseModel):
    """Only fields present in the body are changed; end_date="" clears it"""
    service_name: str | None = None
    price: StrictInt | None = None
    start_date: str | None = None
    end_date: str | None = None

    def changes(self) -> dict:
        # null is treated like an omitted field
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    service_name: str
    price: int
    user_id: uuid.UUID
    start_date: date
    end_date: date | None
    created_at: datetime
    updated_at: datetime


class TotalResponse(BaseModel):
    total: int


# === Endpoints ===

@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    req: CreateSubscriptionRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Создать подписку"""
    use_case = CreateSubscriptionUseCase(db, enforce_end_after_start=settings.ENFORCE_END_AFTER_START)
    return use_case.execute(
        service_name=req.service_name,
        price=req.price,
        user_id=req.user_id,
        start_date=req.start_date,
        end_date=req.end_date,
    )


@router.get("", response_model=list[SubscriptionResponse])
def list_subscriptions(
    user_id: str | None = None,
    service_name: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    db: Session = Depends(get_db),
):
    """Список подписок (новые первыми)"""
    return ListSubscriptionsUseCase(db).execute(
        user_id=user_id,
        service_name=service_name,
        limit=limit,
        offset=offset,
    )


@router.get("/total", response_model=TotalResponse)
def total_cost(
    user_id: str | None = None,
    service_name: str | None = None,
    from_month: str | None = Query(default=None, alias="from"),
    to_month: str | None = Query(default=None, alias="to"),
    db: Session = Depends(get_db),
):
    """Суммарная стоимость подписок за период [from, to] (YYYY-MM)"""
    total = ComputeTotalCostUseCase(db).execute(
        user_id=user_id,
        from_month=from_month,
        to_month=to_month,
        service_name=service_name,
    )
    return TotalResponse(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(subscription_id: str, db: Session = Depends(get_db)):
    """Получить подписку по id"""
    return GetSubscriptionUseCase(db).execute(subscription_id)


@router.put("/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    req: UpdateSubscriptionRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Частично обновить подписку"""
    use_case = UpdateSubscriptionUseCase(db, enforce_end_after_start=settings.ENFORCE_END_AFTER_START)
    return use_case.execute(subscription_id, **req.changes())


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(subscription_id: str, db: Session = Depends(get_db)):
    """Удалить подписку"""
    DeleteSubscriptionUseCase(db).execute(subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
