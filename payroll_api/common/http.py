# payroll_api/common/http.py
from flask import jsonify

def _plain(data):
    # service results (AvailableBalance, Conversion) know their wire shape
    if hasattr(data, "as_dict"):
        return data.as_dict()
    if isinstance(data, list):
        return [_plain(x) for x in data]
    return data

def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": _plain(data)}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status

def created(data=None):
    return ok(data, status=201)

def fail(message="Bad Request", status=400, code=None, detail=None):
    err = {"message": message}
    if code: err["code"] = code
    if detail: err["detail"] = detail
    return jsonify({"success": False, "error": err}), status
