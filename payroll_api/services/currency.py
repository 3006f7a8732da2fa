# payroll_api/services/currency.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from payroll_api.services.exchange_rates import resolve_rate

log = logging.getLogger(__name__)

BASE_CURRENCY = "IQD"
CENT = Decimal("0.01")


def round_money(x) -> Decimal:
    return Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Conversion:
    original_amount: Decimal
    original_currency: str
    converted_amount: Decimal
    exchange_rate: Optional[Decimal] = None
    rate_date: Optional[date] = None
    rate_basis: Optional[str] = None
    # True when no rate existed and the amount was passed through 1:1
    rate_missing: bool = False

    def as_dict(self) -> dict:
        return {
            "originalAmount": float(self.original_amount),
            "originalCurrency": self.original_currency,
            "convertedAmount": float(self.converted_amount),
            "exchangeRate": float(self.exchange_rate) if self.exchange_rate is not None else None,
            "rateDate": self.rate_date.isoformat() if self.rate_date else None,
            "rateBasis": self.rate_basis,
            "rateMissing": self.rate_missing,
        }


def convert(
    amount,
    currency: str,
    entry_date: date,
    rates: Iterable[Any],
    base_currency: str = BASE_CURRENCY,
) -> Conversion:
    """Express `amount` in the base currency as of `entry_date`."""
    amount = Decimal(str(amount))
    currency = (currency or base_currency).upper()

    if currency == base_currency:
        return Conversion(amount, currency, amount)

    quote = resolve_rate(entry_date, rates)
    if quote is None:
        log.warning("No exchange rate found for date %s; converting %s %s at 1:1",
                    entry_date.isoformat(), amount, currency)
        return Conversion(
            original_amount=amount,
            original_currency=currency,
            converted_amount=amount,
            exchange_rate=Decimal(1),
            rate_date=entry_date,
            rate_missing=True,
        )

    return Conversion(
        original_amount=amount,
        original_currency=currency,
        converted_amount=round_money(amount * quote.rate),
        exchange_rate=quote.rate,
        rate_date=quote.rate_date,
        rate_basis=quote.basis,
    )
