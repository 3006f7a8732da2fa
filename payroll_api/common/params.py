# payroll_api/common/params.py
"""Request parsing helpers shared by the blueprints.

Everything here raises ``ValidationError`` on bad input so the error
handlers turn it into a 400 with a readable message.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from flask import request

from payroll_api.common.errors import ValidationError

DEFAULT_LIMIT = 50
MAX_LIMIT = 500
# integer primary keys are BIGINT-sized at most
MAX_ID = 2**63 - 1


def json_body() -> dict:
    j = request.get_json(silent=True)
    if j is None:
        return {}
    if not isinstance(j, dict):
        raise ValidationError("request body must be a JSON object")
    return j


def missing(j: dict, *fields: str) -> list[str]:
    """Names of required fields that are absent, null or blank."""
    out = []
    for f in fields:
        v = j.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            out.append(f)
    return out


def require(j: dict, *fields: str) -> None:
    gone = missing(j, *fields)
    if gone:
        raise ValidationError(", ".join(fields) + " are required", payload={"missing": gone})


def as_date(v: Any, field: str) -> Optional[date]:
    if v is None or v == "":
        return None
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v).strip())
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD")


def as_decimal(v: Any, field: str, *, positive: bool = False) -> Optional[Decimal]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        d = Decimal(str(v))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not d.is_finite():
        raise ValidationError(f"{field} must be a number")
    if positive and d <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return d


def as_int(v: Any, field: str) -> Optional[int]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        n = int(str(v).strip())
    except ValueError:
        raise ValidationError(f"{field} must be an integer")
    if abs(n) > MAX_ID:
        raise ValidationError(f"{field} is out of range")
    return n


def as_currency(v: Any, allowed: Iterable[str], default: Optional[str] = None) -> Optional[str]:
    if v is None or v == "":
        return default
    code = str(v).strip().upper()
    allowed = tuple(allowed)
    if code not in allowed:
        raise ValidationError(f"currency must be one of {', '.join(allowed)}")
    return code


def arg_date(name: str) -> Optional[date]:
    return as_date(request.args.get(name), name)


def limit_offset(default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT):
    try:
        limit = min(max(int(request.args.get("limit", default_limit)), 1), max_limit)
        offset = min(max(int(request.args.get("offset", 0)), 0), MAX_ID)
    except ValueError:
        limit, offset = default_limit, 0
    return limit, offset


def as_bool(v: Any, field: str) -> Optional[bool]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    raise ValidationError(f"{field} must be true or false")
