from datetime import datetime
from payroll_api.extensions import db

class SalaryPayment(db.Model):
    """A full or partial settlement; the latest one restarts the earning period."""
    __tablename__ = "salary_payments"

    id = db.Column(db.Integer, primary_key=True)
    employee_id  = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    amount       = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    notes        = db.Column(db.Text)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_salary_payments_emp_date", "employee_id", "payment_date"),
    )

    creator = db.relationship("User", lazy="joined")
