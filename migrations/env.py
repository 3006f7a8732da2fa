# migrations/env.py
from __future__ import annotations

import logging
from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

config = context.config
if config.config_file_name is not None:
    try:
        fileConfig(config.config_file_name, disable_existing_loggers=False)
    except KeyError:
        # alembic.ini without [loggers]/[handlers] sections
        pass
log = logging.getLogger("alembic.env")


def _flask_app():
    """`flask db ...` already has an app context; bare `alembic` needs one built."""
    if has_app_context():
        return current_app._get_current_object()
    from payroll_api.wsgi import app
    return app


flask_app = _flask_app()
migrate_ext = flask_app.extensions["migrate"]


def _engine():
    with flask_app.app_context():
        return migrate_ext.db.engine


def _url() -> str:
    return _engine().url.render_as_string(hide_password=False).replace("%", "%%")


def _options(url: str) -> dict:
    opts = dict(migrate_ext.configure_args)
    opts.setdefault("compare_type", True)
    # sqlite cannot ALTER constraints in place
    opts.setdefault("render_as_batch", url.startswith("sqlite"))

    def skip_empty(ctx, revision, directives):
        if getattr(config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
            directives[:] = []
            log.info("no schema changes detected, revision not written")

    opts.setdefault("process_revision_directives", skip_empty)
    return opts


config.set_main_option("sqlalchemy.url", _url())
target_metadata = migrate_ext.db.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True, **_options(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = _engine()
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata,
                          **_options(engine.url.drivername))
        with flask_app.app_context():
            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
