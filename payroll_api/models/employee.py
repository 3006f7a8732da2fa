from datetime import datetime
from decimal import Decimal
from payroll_api.extensions import db

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    name     = db.Column(db.String(255), nullable=False)
    phone    = db.Column(db.String(32), nullable=True)
    location = db.Column(db.String(255), nullable=True)

    salary      = db.Column(db.Numeric(12, 2), nullable=False)   # base currency
    salary_days = db.Column(db.Integer, nullable=False)          # accrual period length
    start_date  = db.Column(db.Date, nullable=False)

    # denormalised from the latest salary payment
    last_paid_date = db.Column(db.Date, nullable=True)
    is_paid        = db.Column(db.Boolean, nullable=False, default=False)
    paid_amount    = db.Column(db.Numeric(12, 2), nullable=True)

    is_active  = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("salary_days > 0", name="ck_employee_salary_days_positive"),
    )

    creator = db.relationship("User", lazy="joined")

    @property
    def daily_rate(self) -> Decimal:
        return Decimal(self.salary) / Decimal(self.salary_days)
