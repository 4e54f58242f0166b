"""Alembic environment for the MediaShelf database."""

import pathlib
import sys

from sqlalchemy import create_engine

from alembic import context

sys.path.append(str(pathlib.Path(__file__).resolve().parent.parent))

import mediashelf.models  # noqa: E402

config = context.config
target_metadata = mediashelf.models.Base.metadata


def _db_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    from mediashelf.config.settings import get_config

    return f"sqlite:///{get_config().data_path / 'mediashelf.db'}"


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_db_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations against a live connection."""
    connectable = create_engine(_db_url())

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
