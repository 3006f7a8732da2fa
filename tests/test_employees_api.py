import os
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from payroll_api import create_app
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.payroll.salary_payment import SalaryPayment
from payroll_api.models.payroll.withdrawal import SalaryWithdrawal
from payroll_api.models.user import User

BASE = "/api/v1/hr/employees"


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    with app.app_context():
        db.create_all()
        yield app


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def ids(app):
    u = User(name="HR", email="hr@example.com")
    db.session.add(u); db.session.commit()
    e = Employee(name="Shilan", salary=Decimal("300000"), salary_days=30,
                 start_date=date(2025, 1, 1), created_by=u.id)
    db.session.add(e); db.session.commit()
    return {"user": u.id, "employee": e.id}


def _balance(client, emp_id, as_of):
    return client.get(f"{BASE}/{emp_id}/available-balance?asOf={as_of}")


def test_get_employee(client, ids):
    r = client.get(f"{BASE}/{ids['employee']}")
    assert r.status_code == 200
    d = r.get_json()["data"]
    assert d["name"] == "Shilan"
    assert d["salaryDays"] == 30
    assert d["startDate"] == "2025-01-01"
    assert d["createdByName"] == "HR"
    assert client.get(f"{BASE}/9999").status_code == 404


def test_balance_for_unknown_employee_is_404(client, ids):
    assert _balance(client, 9999, "2025-01-11").status_code == 404


def test_balance_rejects_malformed_as_of(client, ids):
    assert _balance(client, ids["employee"], "yesterday").status_code == 400


def test_balance_shape_during_earning_period(client, ids):
    d = _balance(client, ids["employee"], "2025-01-11").get_json()["data"]
    assert d == {
        "employeeId": ids["employee"],
        "employeeName": "Shilan",
        "baseSalary": 300000,
        "salaryDays": 30,
        "dailyRate": 10000,
        "availableBalance": 100000,
        "balanceSource": "current_earning_period",
        "canWithdraw": True,
        "periodStart": "2025-01-01",
        "periodEnd": None,
        "withdrawnAmount": 0,
    }


def test_unpaid_period_only_counts_withdrawals_inside_window(client, ids):
    for day, amt in ((date(2025, 1, 5), 40000), (date(2025, 1, 31), 70000)):
        db.session.add(SalaryWithdrawal(employee_id=ids["employee"], amount=amt, currency="IQD",
                                        converted_amount=amt, withdrawal_date=day,
                                        created_by=ids["user"]))
    db.session.commit()

    d = _balance(client, ids["employee"], "2025-02-05").get_json()["data"]
    assert d["balanceSource"] == "unpaid_salary_period"
    assert d["periodEnd"] == "2025-01-31"
    assert d["availableBalance"] == 260000


def test_pay_salary_resets_period(client, ids):
    r = client.post(f"{BASE}/{ids['employee']}/pay-salary",
                    json={"amount": 300000, "date": "2025-01-31", "createdBy": ids["user"]})
    assert r.status_code == 200
    emp = r.get_json()["data"]
    assert emp["isPaid"] is True
    assert emp["lastPaidDate"] == "2025-01-31"
    assert emp["paidAmount"] == 300000

    d = _balance(client, ids["employee"], "2025-02-03").get_json()["data"]
    assert d["balanceSource"] == "current_earning_period"
    assert d["periodStart"] == "2025-02-01"
    assert d["availableBalance"] == 30000


def test_pay_salary_validation(client, ids):
    url = f"{BASE}/{ids['employee']}/pay-salary"
    assert client.post(url, json={"date": "2025-01-31", "createdBy": ids["user"]}).status_code == 400
    assert client.post(url, json={"amount": 5, "date": "2025-01-31", "createdBy": 9999}).status_code == 400
    assert client.post(f"{BASE}/9999/pay-salary",
                       json={"amount": 5, "date": "2025-01-31", "createdBy": ids["user"]}).status_code == 404


def test_salary_payments_listed_latest_first(client, ids):
    url = f"{BASE}/{ids['employee']}/pay-salary"
    for d in ("2025-01-31", "2025-03-02", "2025-03-01"):
        client.post(url, json={"amount": 1000, "date": d, "createdBy": ids["user"]})

    body = client.get(f"{BASE}/{ids['employee']}/salary-payments").get_json()
    data = body["data"]
    assert data["employeeName"] == "Shilan"
    assert [p["paymentDate"] for p in data["payments"]] == ["2025-03-02", "2025-03-01", "2025-01-31"]
    assert body["meta"]["limit"] == 50


def _new_employee(client, ids, **overrides):
    body = {
        "name": "Dara",
        "phone": "0750 000 0000",
        "location": "Erbil",
        "salary": 450000,
        "salaryDays": 30,
        "startDate": "2025-02-01",
        "createdBy": ids["user"],
    }
    body.update(overrides)
    return client.post(BASE, json=body)


def test_create_employee(client, ids):
    r = _new_employee(client, ids)
    assert r.status_code == 201
    d = r.get_json()["data"]
    assert d["name"] == "Dara"
    assert d["salary"] == 450000
    assert d["salaryDays"] == 30
    assert d["startDate"] == "2025-02-01"
    assert d["isActive"] is True
    assert d["isPaid"] is False
    assert d["createdByName"] == "HR"

    bal = _balance(client, d["id"], "2025-02-11").get_json()["data"]
    assert bal["availableBalance"] == 150000


@pytest.mark.parametrize("overrides", [
    {"salaryDays": 0},
    {"salaryDays": -5},
    {"salaryDays": "thirty"},
    {"salary": 0},
    {"salary": -1},
    {"startDate": "01/02/2025"},
    {"name": "  "},
    {"createdBy": None},
    {"createdBy": 9999},
])
def test_create_employee_validation(client, ids, overrides):
    r = _new_employee(client, ids, **overrides)
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_employees_filters(client, ids):
    _new_employee(client, ids, name="Dara", location="Erbil")
    _new_employee(client, ids, name="Hana", location="Duhok", isActive=False)

    body = client.get(BASE).get_json()
    assert sorted(e["name"] for e in body["data"]) == ["Dara", "Hana", "Shilan"]
    assert body["meta"]["limit"] == 50

    rows = client.get(f"{BASE}?isActive=false").get_json()["data"]
    assert [e["name"] for e in rows] == ["Hana"]
    rows = client.get(f"{BASE}?location=erb").get_json()["data"]
    assert [e["name"] for e in rows] == ["Dara"]
    rows = client.get(f"{BASE}?search=SHI").get_json()["data"]
    assert [e["name"] for e in rows] == ["Shilan"]
    assert client.get(f"{BASE}?isActive=maybe").status_code == 400


def test_update_employee_coalesces(client, ids):
    url = f"{BASE}/{ids['employee']}"
    r = client.put(url, json={"salary": 600000, "location": "Sulaymaniyah"})
    assert r.status_code == 200
    d = r.get_json()["data"]
    assert d["salary"] == 600000
    assert d["location"] == "Sulaymaniyah"
    assert d["name"] == "Shilan"
    assert d["salaryDays"] == 30

    assert client.put(url, json={"salaryDays": 0}).status_code == 400
    assert client.get(url).get_json()["data"]["salaryDays"] == 30

    r = client.put(url, json={"isActive": False})
    assert r.get_json()["data"]["isActive"] is False
    assert client.put(f"{BASE}/9999", json={"name": "x"}).status_code == 404


def test_delete_employee_removes_related_records(client, ids):
    emp_id = ids["employee"]
    client.post(f"{BASE}/{emp_id}/pay-salary",
                json={"amount": 300000, "date": "2025-01-31", "createdBy": ids["user"]})
    client.post("/api/v1/hr/salary-withdrawals",
                json={"employeeId": emp_id, "amount": 1000, "withdrawalDate": "2025-02-02",
                      "createdBy": ids["user"]})

    r = client.delete(f"{BASE}/{emp_id}")
    assert r.status_code == 200
    assert "deleted" in r.get_json()["data"]["message"]

    assert client.get(f"{BASE}/{emp_id}").status_code == 404
    assert client.delete(f"{BASE}/{emp_id}").status_code == 404
    assert db.session.query(SalaryWithdrawal).filter_by(employee_id=emp_id).count() == 0
    assert db.session.query(SalaryPayment).filter_by(employee_id=emp_id).count() == 0


def test_storage_failure_is_an_opaque_500(client, ids, monkeypatch, caplog):
    def broken_get(self, *a, **kw):
        raise OperationalError("SELECT employees.id", {}, Exception("could not connect to 10.0.0.7:5432"))

    monkeypatch.setattr(Session, "get", broken_get)

    r = client.get(f"{BASE}/{ids['employee']}")
    assert r.status_code == 500
    body = r.get_json()
    assert body["success"] is False
    assert body["error"]["message"] == "Internal server error"
    assert body["error"]["code"] == "STORAGE_ERROR"
    assert "10.0.0.7" not in r.get_data(as_text=True)
    assert "storage failure while loading employee" in caplog.text

    assert client.get(f"{BASE}/{ids['employee']}/available-balance").status_code == 500
