from datetime import datetime
from payroll_api.extensions import db

class User(db.Model):
    """Actor referenced by created_by / entered_by columns.

    Credentials and roles live in the auth service; this table only backs
    display-name joins.
    """
    __tablename__ = "users"

    id         = db.Column(db.Integer, primary_key=True)
    name       = db.Column(db.String(255), nullable=False)
    email      = db.Column(db.String(255), unique=True, index=True, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
