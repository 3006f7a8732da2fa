from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from payroll_api.common.errors import NotFoundError
from payroll_api.services.balance import BalanceService

TODAY = date(2025, 3, 15)


class FakeEmployees:
    def __init__(self, employees=(), payments=()):
        self.employees = {e.id: e for e in employees}
        self.payments = list(payments)

    def get_employee(self, employee_id):
        return self.employees.get(employee_id)

    def list_payments(self, employee_id):
        rows = [p for p in self.payments if p.employee_id == employee_id]
        return sorted(rows, key=lambda p: p.payment_date, reverse=True)


class FakeLedger:
    def __init__(self, rows=()):
        self.rows = list(rows)  # (employee_id, withdrawal_date, converted_amount)

    def sum_converted(self, employee_id, start, end):
        return sum(
            (Decimal(str(amt)) for eid, d, amt in self.rows
             if eid == employee_id and d >= start and (end is None or d < end)),
            Decimal(0),
        )


def _emp(days_ago, emp_id=1, salary=300000, salary_days=30):
    return SimpleNamespace(id=emp_id, name="Karwan", salary=Decimal(salary),
                           salary_days=salary_days, start_date=TODAY - timedelta(days=days_ago))


def _svc(emp, withdrawals=(), payments=()):
    return BalanceService(FakeEmployees([emp], payments), FakeLedger(withdrawals))


def test_ten_days_in_earns_ten_daily_rates():
    bal = _svc(_emp(10)).compute_balance(1, TODAY)
    assert bal.balance_source == "current_earning_period"
    assert bal.available_balance == Decimal("100000")
    assert bal.daily_rate == Decimal("10000")
    assert bal.can_withdraw
    assert bal.period_end is None


def test_elapsed_period_owes_salary_minus_withdrawals_inside_window():
    emp = _emp(35)
    start = emp.start_date
    withdrawals = [
        (1, start, 20000),
        (1, start + timedelta(days=29), 30000),
        (1, start + timedelta(days=30), 99999),   # first day after the window
        (2, start + timedelta(days=1), 77777),    # someone else
    ]
    bal = _svc(emp, withdrawals).compute_balance(1, TODAY)
    assert bal.balance_source == "unpaid_salary_period"
    assert bal.withdrawn == Decimal("50000")
    assert bal.available_balance == Decimal("250000")
    assert bal.period_end == start + timedelta(days=30)


def test_open_period_counts_every_withdrawal_since_start():
    emp = _emp(10)
    withdrawals = [
        (1, emp.start_date - timedelta(days=1), 50000),   # before the period
        (1, emp.start_date + timedelta(days=3), 30000),
        (1, TODAY + timedelta(days=40), 10000),           # future-dated still counts
    ]
    bal = _svc(emp, withdrawals).compute_balance(1, TODAY)
    assert bal.withdrawn == Decimal("40000")
    assert bal.available_balance == Decimal("60000")


def test_balance_never_negative():
    emp = _emp(10)
    bal = _svc(emp, [(1, TODAY, 250000)]).compute_balance(1, TODAY)
    assert bal.available_balance == Decimal("0")
    assert not bal.can_withdraw
    assert bal.as_dict()["availableBalance"] == 0


def test_payment_resets_the_window():
    emp = _emp(90)
    paid = SimpleNamespace(employee_id=1, payment_date=TODAY - timedelta(days=4))
    withdrawals = [(1, TODAY - timedelta(days=10), 80000), (1, TODAY - timedelta(days=1), 5000)]
    bal = _svc(emp, withdrawals, [paid]).compute_balance(1, TODAY)
    assert bal.period_start == TODAY - timedelta(days=3)
    assert bal.available_balance == Decimal("35000")


def test_recomputing_is_idempotent():
    svc = _svc(_emp(35), [(1, TODAY - timedelta(days=30), 1234.56)])
    assert svc.compute_balance(1, TODAY) == svc.compute_balance(1, TODAY)


def test_unknown_employee_raises_not_found():
    with pytest.raises(NotFoundError):
        _svc(_emp(1)).compute_balance(42, TODAY)


def test_clock_is_used_when_no_date_given():
    svc = BalanceService(FakeEmployees([_emp(10)]), FakeLedger(), clock=lambda: TODAY)
    assert svc.compute_balance(1).available_balance == Decimal("100000")


def test_as_dict_fields():
    d = _svc(_emp(10)).compute_balance(1, TODAY).as_dict()
    assert d["employeeId"] == 1
    assert d["employeeName"] == "Karwan"
    assert d["baseSalary"] == 300000
    assert d["salaryDays"] == 30
    assert d["dailyRate"] == 10000
    assert d["availableBalance"] == 100000
    assert d["balanceSource"] == "current_earning_period"
    assert d["canWithdraw"] is True
    assert d["periodEnd"] is None
