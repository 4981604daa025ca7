"""Alembic environment for the examdesk schema (exams, candidates, exam_candidates)."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from examdesk.config import get_settings
from examdesk.db.base import Base
from examdesk.db import models  # noqa: F401 - registers exams/candidates on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """
    Sync database URL for migrations.

    `alembic -x db_url=...` wins over the application settings, which is
    handy for migrating a scratch database.
    """
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return override or get_settings().database_url_sync


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout instead of running it."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the database over a sync (psycopg2) connection."""
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
