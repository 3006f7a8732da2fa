from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, request

from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.http import created, ok
from payroll_api.common.params import (
    arg_date, as_currency, as_date, as_decimal, as_int, json_body, limit_offset, require,
)
from payroll_api.models.payroll.withdrawal import SalaryWithdrawal
from payroll_api.services.payroll_store import SqlEmployeeReader, SqlWithdrawalLedger, get_user

bp = Blueprint("salary_withdrawals", __name__, url_prefix="/api/v1/hr/salary-withdrawals")

# ---------- helpers ----------
def _iso(d):
    return d.isoformat() if d else None

def _flt(x):
    return float(x) if x is not None else None

def _row(w: SalaryWithdrawal) -> Dict[str, Any]:
    return {
        "id": w.id,
        "employeeId": w.employee_id,
        "employeeName": w.employee.name if w.employee else None,
        "amount": _flt(w.amount),
        "currency": w.currency,
        "convertedAmount": _flt(w.converted_amount),
        "exchangeRate": _flt(w.exchange_rate),
        "rateDate": _iso(w.rate_date),
        "withdrawalDate": _iso(w.withdrawal_date),
        "notes": w.notes,
        "createdBy": w.created_by,
        "createdByName": w.creator.name if w.creator else None,
        "createdAt": _iso(w.created_at),
    }

def _currencies():
    return current_app.config["SUPPORTED_CURRENCIES"]

def _changes(j: dict) -> Dict[str, Any]:
    """camelCase body -> column values; absent keys come back as None."""
    notes = j.get("notes")
    return {
        "amount": as_decimal(j.get("amount"), "amount", positive=True),
        "currency": as_currency(j.get("currency"), _currencies()),
        "converted_amount": as_decimal(j.get("convertedAmount"), "convertedAmount", positive=True),
        "exchange_rate": as_decimal(j.get("exchangeRate"), "exchangeRate", positive=True),
        "rate_date": as_date(j.get("rateDate"), "rateDate"),
        "withdrawal_date": as_date(j.get("withdrawalDate"), "withdrawalDate"),
        "notes": notes.strip() if isinstance(notes, str) else notes,
    }

def _withdrawal_or_404(ledger: SqlWithdrawalLedger, wid: int) -> SalaryWithdrawal:
    w = ledger.get(wid)
    if w is None:
        raise NotFoundError("Salary withdrawal not found")
    return w

# ---------- CRUD ----------
@bp.post("")
def create_withdrawal():
    j = json_body()
    require(j, "employeeId", "amount", "withdrawalDate", "createdBy")

    emp_id = as_int(j.get("employeeId"), "employeeId")
    created_by = as_int(j.get("createdBy"), "createdBy")
    fields = _changes(j)
    fields["currency"] = fields["currency"] or current_app.config["BASE_CURRENCY"]
    if fields["converted_amount"] is None:
        fields["converted_amount"] = fields["amount"]

    if SqlEmployeeReader().get_employee(emp_id) is None:
        raise ValidationError("Invalid employee ID")
    if get_user(created_by) is None:
        raise ValidationError("Invalid user ID")

    w = SqlWithdrawalLedger().add(employee_id=emp_id, created_by=created_by, **fields)
    return created(_row(w))


@bp.get("")
def list_withdrawals():
    limit, offset = limit_offset()
    rows = SqlWithdrawalLedger().list(
        employee_id=as_int(request.args.get("employeeId"), "employeeId"),
        start=arg_date("startDate"),
        end=arg_date("endDate"),
        limit=limit,
        offset=offset,
    )
    return ok([_row(w) for w in rows], limit=limit, offset=offset)


@bp.get("/<int:wid>")
def get_withdrawal(wid: int):
    return ok(_row(_withdrawal_or_404(SqlWithdrawalLedger(), wid)))


@bp.put("/<int:wid>")
def update_withdrawal(wid: int):
    ledger = SqlWithdrawalLedger()
    w = _withdrawal_or_404(ledger, wid)
    w = ledger.update(w, _changes(json_body()))
    return ok(_row(w))


@bp.delete("/<int:wid>")
def delete_withdrawal(wid: int):
    ledger = SqlWithdrawalLedger()
    ledger.delete(_withdrawal_or_404(ledger, wid))
    return ok({"message": "Salary withdrawal deleted successfully"})
