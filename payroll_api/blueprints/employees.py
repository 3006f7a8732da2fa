from __future__ import annotations

from datetime import date
from typing import Any, Dict

from flask import Blueprint, request

from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.http import created, ok
from payroll_api.common.params import (
    arg_date, as_bool, as_date, as_decimal, as_int, json_body, limit_offset, require,
)
from payroll_api.models.employee import Employee
from payroll_api.models.payroll.salary_payment import SalaryPayment
from payroll_api.services.balance import BalanceService
from payroll_api.services.payroll_store import SqlEmployeeReader, SqlWithdrawalLedger, get_user

bp = Blueprint("employees", __name__, url_prefix="/api/v1/hr/employees")

# ---------- helpers ----------
def _iso(d) -> str | None:
    return d.isoformat() if d else None

def _flt(x):
    return float(x) if x is not None else None

def _row(e: Employee) -> Dict[str, Any]:
    return {
        "id": e.id,
        "name": e.name,
        "phone": e.phone,
        "location": e.location,
        "salary": _flt(e.salary),
        "salaryDays": e.salary_days,
        "startDate": _iso(e.start_date),
        "lastPaidDate": _iso(e.last_paid_date),
        "isPaid": bool(e.is_paid),
        "paidAmount": _flt(e.paid_amount),
        "isActive": bool(e.is_active),
        "createdBy": e.created_by,
        "createdByName": e.creator.name if e.creator else None,
        "createdAt": _iso(e.created_at),
    }

def _payment_row(p: SalaryPayment) -> Dict[str, Any]:
    return {
        "id": p.id,
        "employeeId": p.employee_id,
        "amount": _flt(p.amount),
        "paymentDate": _iso(p.payment_date),
        "notes": p.notes,
        "createdBy": p.created_by,
        "createdByName": p.creator.name if p.creator else None,
        "createdAt": _iso(p.created_at),
    }

def _employee_or_404(reader: SqlEmployeeReader, emp_id: int) -> Employee:
    emp = reader.get_employee(emp_id)
    if emp is None:
        raise NotFoundError("Employee not found")
    return emp

def _text(v):
    return (v.strip() or None) if isinstance(v, str) else v

def _salary_days(v):
    days = as_int(v, "salaryDays")
    if days is not None and days <= 0:
        raise ValidationError("salaryDays must be greater than zero")
    return days

def _changes(j: dict) -> Dict[str, Any]:
    """camelCase body -> column values; absent keys come back as None."""
    return {
        "name": _text(j.get("name")),
        "phone": _text(j.get("phone")),
        "location": _text(j.get("location")),
        "salary": as_decimal(j.get("salary"), "salary", positive=True),
        "salary_days": _salary_days(j.get("salaryDays")),
        "start_date": as_date(j.get("startDate"), "startDate"),
        "is_active": as_bool(j.get("isActive"), "isActive"),
    }

# ---------- routes ----------
@bp.get("")
def list_employees():
    limit, offset = limit_offset()
    rows = SqlEmployeeReader().list_employees(
        is_active=as_bool(request.args.get("isActive"), "isActive"),
        location=(request.args.get("location") or "").strip() or None,
        search=(request.args.get("search") or "").strip() or None,
        limit=limit,
        offset=offset,
    )
    return ok([_row(e) for e in rows], limit=limit, offset=offset)


@bp.post("")
def create_employee():
    j = json_body()
    require(j, "name", "salary", "salaryDays", "startDate", "createdBy")
    fields = _changes(j)
    fields["is_active"] = True if fields["is_active"] is None else fields["is_active"]
    created_by = as_int(j.get("createdBy"), "createdBy")
    if get_user(created_by) is None:
        raise ValidationError("Invalid user ID")

    emp = SqlEmployeeReader().add_employee(created_by=created_by, **fields)
    return created(_row(emp))


@bp.get("/<int:emp_id>")
def get_employee(emp_id: int):
    return ok(_row(_employee_or_404(SqlEmployeeReader(), emp_id)))


@bp.put("/<int:emp_id>")
def update_employee(emp_id: int):
    reader = SqlEmployeeReader()
    emp = _employee_or_404(reader, emp_id)
    return ok(_row(reader.update_employee(emp, _changes(json_body()))))


@bp.delete("/<int:emp_id>")
def delete_employee(emp_id: int):
    reader = SqlEmployeeReader()
    reader.delete_employee(_employee_or_404(reader, emp_id))
    return ok({"message": "Employee and related records deleted successfully"})


@bp.get("/<int:emp_id>/available-balance")
def available_balance(emp_id: int):
    as_of = arg_date("asOf")
    svc = BalanceService(SqlEmployeeReader(), SqlWithdrawalLedger())
    bal = svc.compute_balance(emp_id, today=as_of)
    return ok(bal)


@bp.post("/<int:emp_id>/pay-salary")
def pay_salary(emp_id: int):
    j = json_body()
    require(j, "amount", "date", "createdBy")
    amount = as_decimal(j.get("amount"), "amount", positive=True)
    paid_on: date = as_date(j.get("date"), "date")
    created_by = as_int(j.get("createdBy"), "createdBy")
    notes = (j.get("notes") or "").strip() or None

    reader = SqlEmployeeReader()
    emp = _employee_or_404(reader, emp_id)
    if get_user(created_by) is None:
        raise ValidationError("Invalid user ID")

    reader.record_payment(emp, amount=amount, paid_on=paid_on, notes=notes, created_by=created_by)
    return ok(_row(emp))


@bp.get("/<int:emp_id>/salary-payments")
def salary_payments(emp_id: int):
    limit, offset = limit_offset()
    reader = SqlEmployeeReader()
    emp = _employee_or_404(reader, emp_id)
    rows = reader.list_payments(emp_id, limit=limit, offset=offset)
    return ok(
        {"payments": [_payment_row(p) for p in rows], "employeeName": emp.name},
        limit=limit, offset=offset,
    )
