from __future__ import annotations

from datetime import date
from typing import Any, Dict

from flask import Blueprint, current_app, request

from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.http import created, ok
from payroll_api.common.params import (
    arg_date, as_currency, as_date, as_decimal, as_int, json_body, require,
)
from payroll_api.models.payroll.dollar_rate import DollarRate
from payroll_api.services.currency import convert
from payroll_api.services.exchange_rates import resolve_rate
from payroll_api.services.payroll_store import (
    add_dollar_rate, find_dollar_rate, get_user, load_dollar_rates,
)

bp = Blueprint("dollar_rates", __name__, url_prefix="/api/v1")

DEFAULT_RATE_LIMIT = 30

def _row(r: DollarRate) -> Dict[str, Any]:
    return {
        "id": r.id,
        "date": r.date.isoformat(),
        "rate": float(r.rate),
        "enteredBy": r.entered_by,
        "enteredByName": r.enterer.name if r.enterer else None,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
    }


@bp.get("/dollar-rates")
def list_rates():
    try:
        limit = max(int(request.args.get("limit", DEFAULT_RATE_LIMIT)), 1)
    except ValueError:
        limit = DEFAULT_RATE_LIMIT
    rows = load_dollar_rates(arg_date("startDate"), arg_date("endDate"), limit=limit)
    return ok([_row(r) for r in rows])


@bp.post("/dollar-rates")
def add_rate():
    j = json_body()
    require(j, "date", "rate", "enteredBy")
    on = as_date(j.get("date"), "date")
    rate = as_decimal(j.get("rate"), "rate", positive=True)
    entered_by = as_int(j.get("enteredBy"), "enteredBy")

    if get_user(entered_by) is None:
        raise ValidationError("Invalid user ID")
    if find_dollar_rate(on) is not None:
        raise ValidationError("Dollar rate already exists for this date")

    return created(_row(add_dollar_rate(on=on, rate=rate, entered_by=entered_by)))


@bp.get("/dollar-rates/resolve")
def resolve():
    on = arg_date("date") or date.today()
    quote = resolve_rate(on, load_dollar_rates())
    if quote is None:
        raise NotFoundError("No dollar rates recorded")
    data = {
        "date": on.isoformat(),
        "rate": float(quote.rate),
        "rateDate": quote.rate_date.isoformat(),
        "basis": quote.basis,
    }
    if quote.is_fallback:
        data["warning"] = "No rate on or before this date; oldest recorded rate used"
    return ok(data)


@bp.get("/currency/convert")
def convert_amount():
    require(request.args, "amount", "currency")
    amount = as_decimal(request.args.get("amount"), "amount")
    currency = as_currency(request.args.get("currency"), current_app.config["SUPPORTED_CURRENCIES"])
    on = arg_date("date") or date.today()

    base = current_app.config["BASE_CURRENCY"]
    rates = load_dollar_rates() if currency != base else []
    conv = convert(amount, currency, on, rates, base_currency=base)

    data = conv.as_dict()
    if conv.rate_missing:
        data["warning"] = f"No exchange rate available; {currency} amount used 1:1"
    return ok(data)
