# payroll_api/services/balance.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol, Sequence

from payroll_api.common.errors import NotFoundError
from payroll_api.services.currency import round_money
from payroll_api.services.payroll_period import compute_period, daily_rate


class EmployeeReader(Protocol):
    def get_employee(self, employee_id: int) -> Optional[Any]: ...

    def list_payments(self, employee_id: int) -> Sequence[Any]:
        """Salary payments, most recent payment_date first."""
        ...


class WithdrawalSums(Protocol):
    def sum_converted(self, employee_id: int, start: date, end: Optional[date]) -> Decimal:
        """Sum of converted_amount with start <= withdrawal_date (< end when given)."""
        ...


@dataclass(frozen=True)
class AvailableBalance:
    employee_id: int
    employee_name: str
    base_salary: Decimal
    salary_days: int
    daily_rate: Decimal
    entitlement: Decimal
    withdrawn: Decimal
    available_balance: Decimal
    balance_source: str
    period_start: date
    period_end: Optional[date]

    @property
    def can_withdraw(self) -> bool:
        return self.available_balance > 0

    def as_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "baseSalary": float(self.base_salary),
            "salaryDays": self.salary_days,
            "dailyRate": float(self.daily_rate),
            "availableBalance": float(self.available_balance),
            "balanceSource": self.balance_source,
            "canWithdraw": self.can_withdraw,
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat() if self.period_end else None,
            "withdrawnAmount": float(self.withdrawn),
        }


class BalanceService:
    """
    Earned-but-unpaid salary for one employee.

    Read only: nothing here stops a withdrawal larger than the balance from
    being recorded afterwards.
    """

    def __init__(
        self,
        employees: EmployeeReader,
        withdrawals: WithdrawalSums,
        *,
        clock: Callable[[], date] = date.today,
    ):
        self._employees = employees
        self._withdrawals = withdrawals
        self._clock = clock

    def compute_balance(self, employee_id: int, today: Optional[date] = None) -> AvailableBalance:
        today = today or self._clock()

        emp = self._employees.get_employee(employee_id)
        if emp is None:
            raise NotFoundError("Employee not found")

        payments = self._employees.list_payments(employee_id)
        period = compute_period(emp, payments, today)

        withdrawn = Decimal(str(
            self._withdrawals.sum_converted(employee_id, period.period_start, period.period_end) or 0
        ))
        available = max(Decimal(0), period.entitlement - withdrawn)

        return AvailableBalance(
            employee_id=emp.id,
            employee_name=emp.name,
            base_salary=Decimal(str(emp.salary)),
            salary_days=int(emp.salary_days),
            daily_rate=daily_rate(emp.salary, emp.salary_days),
            entitlement=period.entitlement,
            withdrawn=withdrawn,
            available_balance=round_money(available),
            balance_source=period.classification,
            period_start=period.period_start,
            period_end=period.period_end,
        )
