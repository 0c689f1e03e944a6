"""
Month arithmetic - all subscription activity is tracked at calendar-month granularity.

Месяц всегда представлен датой первого числа (date(2024, 3, 1) == "2024-03").
"""
import re
from datetime import date
from typing import Iterator

YEAR_MONTH_RE = re.compile(r"([0-9]{4})-([0-9]{2})")


def parse_year_month(value: str) -> date:
    """
    Parse "YYYY-MM" into the first day of that month

    Raises:
        ValueError: если строка не в формате YYYY-MM или месяц вне 01..12

    Example:
        >>> parse_year_month("2024-03")
        datetime.date(2024, 3, 1)
    """
    match = YEAR_MONTH_RE.fullmatch(value)
    if not match:
        raise ValueError(f"not a YYYY-MM value: {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {value!r}")
    return date(year, month, 1)


def format_year_month(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def month_floor(d: date) -> date:
    """Truncate a date to the first day of its month."""
    return d.replace(day=1)


def add_months(d: date, n: int) -> date:
    """Add n months to a date (1st-of-month safe)."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    return date(year, month, 1)


def iter_months(first: date, last: date) -> Iterator[date]:
    """
    Yield every month in [first, last], both ends inclusive

    Пустой итератор, если first > last.
    """
    current = month_floor(first)
    last = month_floor(last)
    while current <= last:
        yield current
        if current == last:
            # date.max month: stepping further would overflow the year
            break
        current = add_months(current, 1)


def count_months(first: date, last: date) -> int:
    """Number of calendar months in [first, last] inclusive (0 if first > last)."""
    return sum(1 for _ in iter_months(first, last))
