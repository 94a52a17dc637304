"""
Alembic environment for the ToDo API schema.

The database URL comes from todo_api.config (environment, then .env), never
from alembic.ini. SQLite databases migrate in batch mode so that column
changes are emitted as table copies.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

import todo_api.models  # noqa: F401  registers users, projects and task_items on Base.metadata
from todo_api.config import get_settings
from todo_api.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = get_settings().DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=IS_SQLITE,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without a database connection."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
