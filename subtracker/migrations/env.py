"""Alembic migration environment."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from subtracker.config import get_settings
from subtracker.infrastructure.db.session import Base
from subtracker.infrastructure.db import models  # noqa: F401  (populate metadata)

config = context.config
target_metadata = Base.metadata

# Connection passed in by subtracker.infrastructure.db.migrate.run_migrations
injected_connection = config.attributes.get("connection")

if injected_connection is None:
    if config.config_file_name is not None:
        fileConfig(config.config_file_name)
    if not config.get_main_option("sqlalchemy.url"):
        config.set_main_option("sqlalchemy.url", get_settings().get_sqlalchemy_url())


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emit SQL to stdout."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    if injected_connection is not None:
        do_run_migrations(injected_connection)
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
