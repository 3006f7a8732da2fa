# payroll_api/services/payroll_period.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional, Sequence

UNPAID_SALARY_PERIOD = "unpaid_salary_period"
CURRENT_EARNING_PERIOD = "current_earning_period"


@dataclass(frozen=True)
class PayrollPeriod:
    """
    The window whose withdrawals count against the current entitlement.

    period_end is exclusive and is only set for UNPAID_SALARY_PERIOD; an
    earning period in progress is open-ended.
    """
    period_start: date
    period_end: Optional[date]
    classification: str
    days_counted: int
    entitlement: Decimal


def daily_rate(salary, salary_days: int) -> Decimal:
    return Decimal(str(salary)) / Decimal(int(salary_days))


def last_payment_date(payments: Sequence[Any]) -> Optional[date]:
    dates = [p.payment_date for p in payments if p.payment_date is not None]
    return max(dates) if dates else None


def compute_period(employee: Any, payments: Sequence[Any], today: date) -> PayrollPeriod:
    """
    Work out the active accrual window and what the employee is owed for it.

    - No payments: the window opens on start_date and elapsed days are counted
      from start_date.
    - With payments: the window opens the day after the latest payment and
      elapsed days are counted from the payment date itself.

    Once a full salary_days have elapsed the whole salary is owed for a
    bounded window of salary_days; otherwise each elapsed day earns
    salary / salary_days, with at least one day credited.
    """
    salary = Decimal(str(employee.salary))
    salary_days = int(employee.salary_days)
    rate = daily_rate(salary, salary_days)

    last_paid = last_payment_date(payments)
    if last_paid is None:
        elapsed = (today - employee.start_date).days
        start = employee.start_date
    else:
        elapsed = (today - last_paid).days
        start = last_paid + timedelta(days=1)

    if elapsed >= salary_days:
        return PayrollPeriod(
            period_start=start,
            period_end=start + timedelta(days=salary_days),
            classification=UNPAID_SALARY_PERIOD,
            days_counted=salary_days,
            entitlement=salary,
        )

    days = max(1, elapsed)
    return PayrollPeriod(
        period_start=start,
        period_end=None,
        classification=CURRENT_EARNING_PERIOD,
        days_counted=days,
        entitlement=days * rate,
    )
