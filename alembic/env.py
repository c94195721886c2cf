"""Alembic environment for the ledger state, balance and event tables.

The target URL comes from `sqlalchemy.url` when a caller sets it (tests point
it at a temporary SQLite file) and otherwise from `DATABASE_URL`. SQLite runs in
batch mode so later revisions can alter its tables.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from splitter.config import config_load_database_url

config = context.config

# Embedding callers pass configure_logger=False to keep their own handlers.
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

# The schema is written as explicit revisions; there is no ORM metadata to diff.
target_metadata = None


def migration_resolve_database_url() -> str:
    """Return the configured URL, falling back to the `DATABASE_URL` setting.

    Returns:
        str: SQLAlchemy URL of the ledger database.

    Raises:
        SettingsLoadError: Raised when no database URL can be resolved.
    """

    configured_url = config.get_main_option("sqlalchemy.url")
    if configured_url:
        return configured_url
    database_url = config_load_database_url()
    config.set_main_option("sqlalchemy.url", database_url)
    return database_url


def run_migrations_offline() -> None:
    """Render ledger DDL as a SQL script without connecting."""

    context.configure(
        url=migration_resolve_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply ledger revisions over a live connection."""

    migration_resolve_database_url()
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
