from datetime import datetime
from payroll_api.extensions import db

class SalaryWithdrawal(db.Model):
    __tablename__ = "salary_withdrawals"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    amount           = db.Column(db.Numeric(15, 2), nullable=False)
    currency         = db.Column(db.String(3), nullable=False, default="IQD")
    converted_amount = db.Column(db.Numeric(15, 2), nullable=False)   # base currency
    exchange_rate    = db.Column(db.Numeric(10, 4), nullable=True)
    rate_date        = db.Column(db.Date, nullable=True)

    withdrawal_date = db.Column(db.Date, nullable=False)
    notes           = db.Column(db.Text)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("currency IN ('USD', 'IQD')", name="ck_salary_withdrawal_currency"),
        db.Index("ix_salary_withdrawals_emp_date", "employee_id", "withdrawal_date"),
    )

    employee = db.relationship("Employee", lazy="joined")
    creator  = db.relationship("User", lazy="joined")
