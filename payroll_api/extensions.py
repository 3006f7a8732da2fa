# payroll_api/extensions.py
import os
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

def normalize_db_url(url: str) -> str:
    if not url:
        return url
    # Render / Heroku style → SQLAlchemy psycopg3 driver
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url

def engine_options(url: str, timeout_seconds: float) -> dict:
    """Pool + per-statement deadline for the configured backend."""
    if url.startswith("sqlite"):
        # sqlite has no statement timeout; bound lock waits instead
        return {"connect_args": {"timeout": timeout_seconds}}

    opts = {
        "pool_pre_ping": True,
        "pool_recycle": 270,
        "pool_size": 5,
        "max_overflow": 2,
        "pool_timeout": 30,
    }
    if url.startswith("postgresql"):
        ms = int(timeout_seconds * 1000)
        opts["connect_args"] = {"options": f"-c statement_timeout={ms}"}
    return opts

def init_db(app):
    url = os.getenv("DATABASE_URL", app.config.get("SQLALCHEMY_DATABASE_URI", "")) or ""
    url = normalize_db_url(url)
    app.config["SQLALCHEMY_DATABASE_URI"] = url
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options(
        url, float(app.config.get("STORAGE_TIMEOUT_SECONDS", 15))
    )

    db.init_app(app)
    migrate.init_app(app, db)
