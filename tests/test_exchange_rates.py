from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from payroll_api.services.exchange_rates import (
    BASIS_EXACT, BASIS_OLDEST, BASIS_PRIOR, RatePoint, resolve_rate,
)


def _rates(*pairs):
    return [RatePoint(date.fromisoformat(d), Decimal(str(r))) for d, r in pairs]


def test_empty_table_resolves_to_none():
    assert resolve_rate(date(2024, 1, 10), []) is None


def test_exact_date_wins():
    rates = _rates(("2024-01-05", 1490), ("2024-01-10", 1500), ("2024-01-12", 1510))
    q = resolve_rate(date(2024, 1, 10), rates)
    assert q.rate == Decimal("1500")
    assert q.rate_date == date(2024, 1, 10)
    assert q.basis == BASIS_EXACT


def test_nearest_prior_rate_when_no_exact_match():
    rates = _rates(("2024-01-01", 1480), ("2024-01-05", 1490), ("2024-01-12", 1510))
    q = resolve_rate(date(2024, 1, 10), rates)
    assert q.rate_date == date(2024, 1, 5)
    assert q.rate == Decimal("1490")
    assert q.basis == BASIS_PRIOR


def test_target_before_every_rate_falls_back_to_oldest():
    q = resolve_rate(date(2024, 1, 10), _rates(("2024-02-01", 1450)))
    assert q is not None
    assert q.rate_date == date(2024, 2, 1)
    assert q.rate == Decimal("1450")
    assert q.basis == BASIS_OLDEST
    assert q.is_fallback


def test_oldest_fallback_picks_earliest_of_later_rates():
    rates = _rates(("2024-03-01", 1470), ("2024-02-01", 1450), ("2024-02-15", 1460))
    q = resolve_rate(date(2024, 1, 10), rates)
    assert q.rate_date == date(2024, 2, 1)


def test_unsorted_input_and_row_like_objects():
    rows = [
        SimpleNamespace(date=date(2024, 1, 1), rate=1480.5),
        SimpleNamespace(date=date(2024, 1, 20), rate="1520"),
        SimpleNamespace(date=date(2024, 1, 8), rate=Decimal("1495.25")),
    ]
    q = resolve_rate(date(2024, 1, 15), rows)
    assert q.rate_date == date(2024, 1, 8)
    assert q.rate == Decimal("1495.25")
