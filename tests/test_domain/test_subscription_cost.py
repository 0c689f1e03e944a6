"""
Tests for subscription cost aggregation and the partial-update patch
"""
import pytest
from dataclasses import dataclass
from datetime import date

from subtracker.domain.subscription import (
    UNSET, SubscriptionPatch, SubscriptionValidationError,
    overlaps, subscription_cost, total_cost,
)


@dataclass
class Sub:
    price: int
    start_date: date
    end_date: date | None = None
    service_name: str = "Netflix"


def m(year: int, month: int) -> date:
    return date(year, month, 1)


JAN_TO_MAR = Sub(price=100, start_date=m(2024, 1), end_date=m(2024, 3))


def test_closed_subscription_inside_range_counts_each_month():
    assert total_cost([JAN_TO_MAR], m(2024, 1), m(2024, 12)) == 300


def test_partial_overlap_single_month():
    assert total_cost([JAN_TO_MAR], m(2024, 2), m(2024, 2)) == 100


def test_no_overlap_after_end():
    assert total_cost([JAN_TO_MAR], m(2024, 4), m(2024, 12)) == 0


def test_no_overlap_before_start():
    assert total_cost([JAN_TO_MAR], m(2023, 1), m(2023, 12)) == 0


def test_end_month_is_inclusive():
    assert total_cost([JAN_TO_MAR], m(2024, 3), m(2024, 3)) == 100


def test_open_ended_clamped_to_query_range():
    sub = Sub(price=250, start_date=m(2023, 6))
    assert total_cost([sub], m(2024, 1), m(2024, 3)) == 250 * 3


def test_open_ended_starting_inside_range():
    sub = Sub(price=10, start_date=m(2024, 11))
    assert total_cost([sub], m(2024, 1), m(2025, 2)) == 10 * 4


def test_open_ended_at_last_representable_month():
    sub = Sub(price=5, start_date=m(9999, 1))
    assert total_cost([sub], m(9999, 12), m(9999, 12)) == 5


def test_range_spanning_years():
    sub = Sub(price=5, start_date=m(2023, 10), end_date=m(2024, 2))
    assert total_cost([sub], m(2023, 1), m(2025, 1)) == 5 * 5


def test_sum_over_several_subscriptions():
    subs = [
        JAN_TO_MAR,
        Sub(price=50, start_date=m(2024, 3)),
        Sub(price=7, start_date=m(2025, 1)),
    ]
    # 3*100 + 4*50 (Mar..Jun) + 0
    assert total_cost(subs, m(2024, 1), m(2024, 6)) == 300 + 200


def test_empty_input_is_zero():
    assert total_cost([], m(2024, 1), m(2024, 12)) == 0


def test_from_after_to_is_rejected_regardless_of_data():
    with pytest.raises(SubscriptionValidationError):
        total_cost([], m(2024, 5), m(2024, 4))
    with pytest.raises(SubscriptionValidationError):
        total_cost([JAN_TO_MAR], m(2024, 5), m(2024, 4))


def test_end_before_start_contributes_zero():
    sub = Sub(price=100, start_date=m(2024, 5), end_date=m(2024, 2))
    assert subscription_cost(sub.price, sub.start_date, sub.end_date, m(2024, 1), m(2024, 12)) == 0
    assert total_cost([sub], m(2024, 1), m(2024, 12)) == 0


def test_subscription_cost_lower_bound_above_upper_is_zero():
    assert subscription_cost(100, m(2025, 1), None, m(2024, 1), m(2024, 12)) == 0


def test_overlaps():
    assert overlaps(m(2024, 1), m(2024, 3), m(2024, 3), m(2024, 6))
    assert not overlaps(m(2024, 1), m(2024, 3), m(2024, 4), m(2024, 6))
    assert overlaps(m(2020, 1), None, m(2024, 4), m(2024, 6))
    assert not overlaps(m(2024, 7), None, m(2024, 4), m(2024, 6))


def test_total_is_monotonic_in_to_when_nothing_ends():
    subs = [
        Sub(price=100, start_date=m(2023, 6)),
        Sub(price=30, start_date=m(2024, 2)),
        Sub(price=1, start_date=m(2024, 9)),
    ]
    previous = 0
    to_month = m(2024, 1)
    for _ in range(24):
        current = total_cost(subs, m(2024, 1), to_month)
        assert current >= previous
        previous = current
        month = to_month.month % 12 + 1
        to_month = date(to_month.year + (to_month.month == 12), month, 1)


# === SubscriptionPatch ===


def test_patch_defaults_are_unset():
    patch = SubscriptionPatch()
    assert patch.is_empty()
    assert patch.changes() == {}
    assert patch.end_date is UNSET


def test_patch_distinguishes_clear_from_unset():
    cleared = SubscriptionPatch(end_date=None)
    assert not cleared.is_empty()
    assert cleared.changes() == {"end_date": None}


def test_patch_apply_writes_only_supplied_fields():
    sub = Sub(price=100, start_date=m(2024, 1), end_date=m(2024, 3))
    written = SubscriptionPatch(price=120, end_date=None).apply(sub)

    assert sorted(written) == ["end_date", "price"]
    assert sub.price == 120
    assert sub.end_date is None
    assert sub.start_date == m(2024, 1)
    assert sub.service_name == "Netflix"


def test_unset_is_a_singleton():
    assert type(UNSET)() is UNSET
    assert repr(UNSET) == "UNSET"
