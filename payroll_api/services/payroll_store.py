# payroll_api/services/payroll_store.py
"""SQLAlchemy-backed storage used by the balance engine and the HR blueprints."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from payroll_api.common.errors import StorageError
from payroll_api.common.params import MAX_ID
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.user import User
from payroll_api.models.payroll.dollar_rate import DollarRate
from payroll_api.models.payroll.salary_payment import SalaryPayment
from payroll_api.models.payroll.withdrawal import SalaryWithdrawal

log = logging.getLogger(__name__)

EMPLOYEE_MUTABLE = (
    "name", "phone", "location", "salary", "salary_days", "start_date", "is_active",
)

# columns a PUT may touch; everything else is fixed at creation
WITHDRAWAL_MUTABLE = (
    "amount", "currency", "converted_amount", "exchange_rate",
    "rate_date", "withdrawal_date", "notes",
)



def _addressable(row_id: int) -> bool:
    # ids past the BIGINT range cannot exist and overflow the driver
    return 0 < row_id <= MAX_ID


@contextmanager
def storage_guard(what: str, *, commit: bool = False):
    """Roll back and re-raise persistence failures as StorageError."""
    try:
        yield
        if commit:
            db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("storage failure while %s", what)
        raise StorageError() from e


def get_user(user_id: int) -> Optional[User]:
    if not _addressable(user_id):
        return None
    with storage_guard(f"loading user {user_id}"):
        return db.session.get(User, user_id)


class SqlEmployeeReader:
    def get_employee(self, employee_id: int) -> Optional[Employee]:
        if not _addressable(employee_id):
            return None
        with storage_guard(f"loading employee {employee_id}"):
            return db.session.get(Employee, employee_id)

    def list_payments(self, employee_id: int, limit: Optional[int] = None, offset: int = 0) -> List[SalaryPayment]:
        with storage_guard(f"listing payments of employee {employee_id}"):
            q = (
                SalaryPayment.query
                .filter(SalaryPayment.employee_id == employee_id)
                .order_by(SalaryPayment.payment_date.desc(), SalaryPayment.created_at.desc())
            )
            if limit is not None:
                q = q.limit(limit).offset(offset)
            return q.all()

    def record_payment(self, emp: Employee, *, amount: Decimal, paid_on: date,
                       notes: Optional[str], created_by: int) -> SalaryPayment:
        with storage_guard(f"recording payment for employee {emp.id}", commit=True):
            pay = SalaryPayment(
                employee_id=emp.id,
                amount=amount,
                payment_date=paid_on,
                notes=notes,
                created_by=created_by,
            )
            db.session.add(pay)
            emp.last_paid_date = paid_on
            emp.is_paid = True
            emp.paid_amount = amount
        log.info("salary payment %s recorded for employee %s (%s on %s)",
                 pay.id, emp.id, amount, paid_on.isoformat())
        return pay

    def list_employees(self, *, is_active: Optional[bool] = None, location: Optional[str] = None,
                       search: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Employee]:
        with storage_guard("listing employees"):
            q = Employee.query
            if is_active is not None:
                q = q.filter(Employee.is_active.is_(is_active))
            if location:
                q = q.filter(Employee.location.ilike(f"%{location}%"))
            if search:
                q = q.filter(Employee.name.ilike(f"%{search}%"))
            q = q.order_by(Employee.created_at.desc(), Employee.id.desc())
            return q.limit(limit).offset(offset).all()

    def add_employee(self, **fields) -> Employee:
        with storage_guard("creating employee", commit=True):
            emp = Employee(**fields)
            db.session.add(emp)
        log.info("employee %s created: %s, salary %s over %s days from %s",
                 emp.id, emp.name, emp.salary, emp.salary_days, emp.start_date.isoformat())
        return emp

    def update_employee(self, emp: Employee, changes: dict) -> Employee:
        with storage_guard(f"updating employee {emp.id}", commit=True):
            for k in EMPLOYEE_MUTABLE:
                v = changes.get(k)
                if v is not None:
                    setattr(emp, k, v)
        log.info("employee %s updated", emp.id)
        return emp

    def delete_employee(self, emp: Employee) -> None:
        """Remove the employee with its withdrawals and salary payments."""
        emp_id = emp.id
        with storage_guard(f"deleting employee {emp_id}", commit=True):
            db.session.execute(delete(SalaryWithdrawal).where(SalaryWithdrawal.employee_id == emp_id))
            db.session.execute(delete(SalaryPayment).where(SalaryPayment.employee_id == emp_id))
            db.session.delete(emp)
        log.info("employee %s deleted with its withdrawals and payments", emp_id)


class SqlWithdrawalLedger:
    def sum_converted(self, employee_id: int, start: date, end: Optional[date]) -> Decimal:
        with storage_guard(f"summing withdrawals of employee {employee_id}"):
            q = db.session.query(func.coalesce(func.sum(SalaryWithdrawal.converted_amount), 0)).filter(
                SalaryWithdrawal.employee_id == employee_id,
                SalaryWithdrawal.withdrawal_date >= start,
            )
            if end is not None:
                q = q.filter(SalaryWithdrawal.withdrawal_date < end)
            total = q.scalar()
        return Decimal(str(total or 0))

    def get(self, withdrawal_id: int) -> Optional[SalaryWithdrawal]:
        if not _addressable(withdrawal_id):
            return None
        with storage_guard(f"loading withdrawal {withdrawal_id}"):
            return db.session.get(SalaryWithdrawal, withdrawal_id)

    def list(self, *, employee_id: Optional[int] = None, start: Optional[date] = None,
             end: Optional[date] = None, limit: int = 50, offset: int = 0) -> List[SalaryWithdrawal]:
        with storage_guard("listing withdrawals"):
            q = SalaryWithdrawal.query
            if employee_id is not None:
                q = q.filter(SalaryWithdrawal.employee_id == employee_id)
            if start:
                q = q.filter(SalaryWithdrawal.withdrawal_date >= start)
            if end:
                q = q.filter(SalaryWithdrawal.withdrawal_date <= end)
            q = q.order_by(SalaryWithdrawal.withdrawal_date.desc(),
                           SalaryWithdrawal.created_at.desc(),
                           SalaryWithdrawal.id.desc())
            return q.limit(limit).offset(offset).all()

    def add(self, **fields) -> SalaryWithdrawal:
        with storage_guard("creating withdrawal", commit=True):
            w = SalaryWithdrawal(**fields)
            db.session.add(w)
        log.info("salary withdrawal %s created for employee %s: %s %s -> %s",
                 w.id, w.employee_id, w.amount, w.currency, w.converted_amount)
        return w

    def update(self, w: SalaryWithdrawal, changes: dict) -> SalaryWithdrawal:
        """Coalesce update: keys that are absent or None keep the stored value."""
        with storage_guard(f"updating withdrawal {w.id}", commit=True):
            for k in WITHDRAWAL_MUTABLE:
                v = changes.get(k)
                if v is not None:
                    setattr(w, k, v)
        log.info("salary withdrawal %s updated", w.id)
        return w

    def delete(self, w: SalaryWithdrawal) -> None:
        wid = w.id
        with storage_guard(f"deleting withdrawal {wid}", commit=True):
            db.session.delete(w)
        log.info("salary withdrawal %s deleted", wid)


def load_dollar_rates(start: Optional[date] = None, end: Optional[date] = None,
                      limit: Optional[int] = None) -> List[DollarRate]:
    with storage_guard("loading dollar rates"):
        q = DollarRate.query
        if start:
            q = q.filter(DollarRate.date >= start)
        if end:
            q = q.filter(DollarRate.date <= end)
        q = q.order_by(DollarRate.date.desc())
        if limit is not None:
            q = q.limit(limit)
        return q.all()


def find_dollar_rate(on: date) -> Optional[DollarRate]:
    with storage_guard(f"loading dollar rate for {on.isoformat()}"):
        return DollarRate.query.filter(DollarRate.date == on).first()


def add_dollar_rate(*, on: date, rate: Decimal, entered_by: int) -> DollarRate:
    with storage_guard(f"adding dollar rate for {on.isoformat()}", commit=True):
        r = DollarRate(date=on, rate=rate, entered_by=entered_by)
        db.session.add(r)
    log.info("dollar rate %s entered for %s", rate, on.isoformat())
    return r
