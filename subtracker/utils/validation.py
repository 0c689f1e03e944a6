"""
Validation utilities
"""
import uuid
from datetime import date

from subtracker.domain.months import parse_year_month
from subtracker.domain.subscription import SubscriptionValidationError


def parse_int(value: str | None, default: int) -> int:
    """
    Parse a query-string integer, falling back to default

    Example:
        >>> parse_int("20", 50)
        20
        >>> parse_int("abc", 50)
        50
        >>> parse_int("-1", 50)
        50
    """
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if parsed < 0:
        return default
    return parsed


def validate_year_month(value: str | None, field: str) -> date:
    """
    Валидировать "YYYY-MM" и вернуть первое число месяца

    Raises:
        SubscriptionValidationError: если формат неверный
    """
    if not isinstance(value, str):
        raise SubscriptionValidationError(f"invalid {field} (YYYY-MM)")
    try:
        return parse_year_month(value)
    except ValueError:
        raise SubscriptionValidationError(f"invalid {field} (YYYY-MM)")


def validate_uuid(value: str | None, field: str) -> uuid.UUID:
    if not value:
        raise SubscriptionValidationError(f"{field} required")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise SubscriptionValidationError(f"invalid {field}")


def validate_price(value) -> int:
    """Price is a positive integer (minor units per month)"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SubscriptionValidationError("price must be > 0")
    return value


def validate_service_name(value: str | None) -> str:
    name = (value or "").strip()
    if not name:
        raise SubscriptionValidationError("service_name must not be empty")
    if len(name) > 255:
        raise SubscriptionValidationError("service_name is too long (max 255)")
    return name
