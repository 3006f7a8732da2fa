from datetime import datetime
from payroll_api.extensions import db

class DollarRate(db.Model):
    """IQD per 1 USD on a given day. Sparse: most days have no row."""
    __tablename__ = "dollar_rates"

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, unique=True)
    rate = db.Column(db.Numeric(10, 4), nullable=False)

    entered_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("rate > 0", name="ck_dollar_rate_positive"),
    )

    enterer = db.relationship("User", lazy="joined")
