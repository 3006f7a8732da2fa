# payroll_api/services/exchange_rates.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, NamedTuple, Optional

# which rule picked the rate
BASIS_EXACT = "exact"
BASIS_PRIOR = "prior"
BASIS_OLDEST = "oldest"


class RatePoint(NamedTuple):
    date: date
    rate: Decimal


@dataclass(frozen=True)
class RateQuote:
    rate: Decimal
    rate_date: date
    basis: str

    @property
    def is_fallback(self) -> bool:
        return self.basis == BASIS_OLDEST


def _point(r: Any) -> RatePoint:
    return RatePoint(r.date, Decimal(str(r.rate)))


def resolve_rate(target: date, rates: Iterable[Any]) -> Optional[RateQuote]:
    """
    Pick the rate applicable on `target` from a sparse, date-indexed table.

    Order of preference:
      1) a rate dated exactly `target`
      2) the nearest rate dated before `target`
      3) the oldest rate in the table, even though it is dated after `target`

    Returns None only when the table is empty. `rates` may be DollarRate rows
    or anything else exposing `.date` and `.rate`.
    """
    points = sorted((_point(r) for r in rates), key=lambda p: p.date, reverse=True)
    if not points:
        return None

    for p in points:
        if p.date == target:
            return RateQuote(p.rate, p.date, BASIS_EXACT)

    for p in points:
        if p.date <= target:
            return RateQuote(p.rate, p.date, BASIS_PRIOR)

    oldest = points[-1]
    return RateQuote(oldest.rate, oldest.date, BASIS_OLDEST)
