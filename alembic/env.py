"""
alembic/env.py — Migration Environment
=======================================

Migrations connect through :func:`pawprint.database.engine.create_db_engine`,
the same factory the API uses, so a SQLite development database is migrated
with foreign keys on and ``BEGIN IMMEDIATE`` transactions.  ``DATABASE_URL``
(from the environment or ``.env``) overrides ``sqlalchemy.url`` in
alembic.ini.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from dotenv import load_dotenv

from alembic import context

load_dotenv()

config = context.config

database_url = os.getenv("DATABASE_URL")
if database_url:
    config.set_main_option("sqlalchemy.url", database_url)

# Loggers created before the migration (the app's, when run in-process)
# stay enabled.
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

from pawprint.database.engine import create_db_engine  # noqa: E402
from pawprint.database.models import Base  # noqa: E402

target_metadata = Base.metadata


def _batch_mode(url: str) -> bool:
    # SQLite cannot ALTER most constraints in place.
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting (``alembic upgrade --sql``)."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_batch_mode(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url")
    engine = create_db_engine(url)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                render_as_batch=_batch_mode(url),
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
