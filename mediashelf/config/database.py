"""Database Configuration for MediaShelf."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import TracebackType

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from mediashelf.exceptions import DataPathError

__all__ = ["DatabaseContext", "MediaShelfDB", "get_db"]

ALEMBIC_DIR = Path(__file__).resolve().parent.parent.parent / "alembic"


class DatabaseContext:
    """A single session scope, used as ``with db() as ctx``."""

    def __init__(self, session: Session) -> None:
        """Wrap a freshly opened session."""
        self.session = session

    def __enter__(self) -> DatabaseContext:
        """Enter the session scope."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Roll back anything left uncommitted and close the session."""
        try:
            if exc_type is not None:
                self.session.rollback()
        finally:
            self.session.close()


class MediaShelfDB:
    """Database manager for the MediaShelf application.

    Handles creation of the SQLite database file and its schema. The schema is
    brought up to date with Alembic migrations, or created directly from the
    model metadata when ``migrate`` is False.

    Calling the instance opens a new session scope, so concurrent requests never
    share a session.
    """

    def __init__(self, data_path: Path, migrate: bool = True) -> None:
        """Initializes the database manager.

        Args:
            data_path (Path): Directory where the database should be stored
            migrate (bool): Run Alembic migrations instead of ``create_all``

        Raises:
            DataPathError: If data_path exists but is a file instead of a directory
        """
        self.data_path = data_path
        self.db_path = data_path / "mediashelf.db"
        self.url = f"sqlite:///{self.db_path}"

        self.engine = self._setup_db()
        self._SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        if migrate:
            self._do_migrations()
        else:
            from mediashelf.models import Base

            Base.metadata.create_all(self.engine)

    def _setup_db(self) -> Engine:
        """Validate the data directory and create the engine."""
        import mediashelf.models  # noqa: F401

        if not self.data_path.exists():
            self.data_path.mkdir(parents=True, exist_ok=True)
        elif self.data_path.is_file():
            raise DataPathError(
                f"The path '{self.data_path}' is a file, please delete it first or "
                "choose a different data folder path"
            )

        engine = create_engine(
            self.url,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cur = dbapi_connection.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
                cur.execute("PRAGMA foreign_keys=ON;")
            finally:
                cur.close()

        return engine

    def _do_migrations(self) -> None:
        """Upgrade the schema to the latest Alembic revision."""
        from alembic import command
        from alembic.config import Config

        cfg = Config()
        cfg.set_main_option("script_location", str(ALEMBIC_DIR))
        cfg.set_main_option("sqlalchemy.url", self.url)
        command.upgrade(cfg, "head")

    def __call__(self) -> DatabaseContext:
        """Open a new session scope."""
        return DatabaseContext(self._SessionLocal())

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()


@lru_cache(maxsize=1)
def get_db() -> MediaShelfDB:
    """Get the application database, created on first use."""
    from mediashelf.config.settings import get_config

    return MediaShelfDB(get_config().data_path)
