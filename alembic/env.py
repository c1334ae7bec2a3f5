"""Alembic environment for the runners registry schema (DATABASE_URL from runners_api settings)."""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from runners_api.core.config import settings
from runners_api.models import Base  # registers users, runners, cases, devices, topic_subscriptions

config = context.config
if config.config_file_name is not None:
    # alembic.ini without logging sections makes fileConfig raise KeyError.
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        pass

DATABASE_URL = settings.DATABASE_URL
# SQLite cannot ALTER constraints in place; batch mode recreates the table.
USE_BATCH = DATABASE_URL.startswith("sqlite")


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=USE_BATCH,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
