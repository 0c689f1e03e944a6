"""
Subscription domain - cost aggregation over month ranges and the partial-update patch.

Подписка активна в месяцы [start_date, end_date] включительно.
end_date = None означает бессрочную подписку.
"""
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Iterable

from subtracker.domain.months import count_months


class SubscriptionValidationError(ValueError):
    """Ошибка валидации подписки (400)"""
    pass


class SubscriptionNotFoundError(LookupError):
    """Подписка с таким id не найдена (404)"""

    def __init__(self, subscription_id: Any = None):
        self.subscription_id = subscription_id
        super().__init__("subscription not found")


class SubscriptionStoreError(RuntimeError):
    """Ошибка хранилища; исходное исключение доступно через __cause__"""
    pass


class _Unset:
    """Marker for a patch field that was not supplied at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class SubscriptionPatch:
    """
    Partial update of a subscription

    Каждое поле в одном из трёх состояний:
    - UNSET: поле не передано, значение не меняется
    - значение: поле перезаписывается
    - None (только end_date): дата окончания явно очищена
    """
    service_name: Any = UNSET
    price: Any = UNSET
    start_date: Any = UNSET
    end_date: Any = UNSET

    def changes(self) -> dict[str, Any]:
        """Only the fields that were supplied, including explicit clears."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()

    def apply(self, target: Any) -> list[str]:
        """
        Apply the patch to any object with matching attributes

        Returns:
            Names of the fields that were written
        """
        changed = self.changes()
        for name, value in changed.items():
            setattr(target, name, value)
        return list(changed)


def effective_end(end_date: date | None, to_month: date) -> date:
    """Open-ended subscriptions are clamped to the query's upper bound."""
    return end_date if end_date is not None else to_month


def overlaps(start_date: date, end_date: date | None, from_month: date, to_month: date) -> bool:
    return start_date <= to_month and effective_end(end_date, to_month) >= from_month


def subscription_cost(
    price: int,
    start_date: date,
    end_date: date | None,
    from_month: date,
    to_month: date,
) -> int:
    """
    Cost of one subscription inside [from_month, to_month]

    Месяцы перебираются по одному (без формулы разницы месяцев),
    неполных месяцев не бывает: месяц либо учитывается целиком, либо нет.

    Example:
        >>> subscription_cost(100, date(2024, 1, 1), date(2024, 3, 1),
        ...                   date(2024, 1, 1), date(2024, 12, 1))
        300
    """
    lower = max(start_date, from_month)
    upper = min(effective_end(end_date, to_month), to_month)
    if lower > upper:
        return 0
    return price * count_months(lower, upper)


def validate_month_range(from_month: date, to_month: date) -> None:
    if from_month > to_month:
        raise SubscriptionValidationError("from must be <= to")


def total_cost(subscriptions: Iterable[Any], from_month: date, to_month: date) -> int:
    """
    Sum subscription costs over an inclusive month range

    Args:
        subscriptions: объекты с атрибутами price, start_date, end_date
        from_month: первый месяц периода (1-е число)
        to_month: последний месяц периода (1-е число), включительно

    Returns:
        Итоговая сумма (0 если ничего не пересекается)

    Raises:
        SubscriptionValidationError: если from_month > to_month
    """
    validate_month_range(from_month, to_month)
    total = 0
    for sub in subscriptions:
        if not overlaps(sub.start_date, sub.end_date, from_month, to_month):
            continue
        total += subscription_cost(sub.price, sub.start_date, sub.end_date, from_month, to_month)
    return total
