"""Shared pytest configuration and fixtures for the test suite."""

import atexit
import os
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="ms-tests-"))
os.environ["MS_DATA_PATH"] = str(_TEST_DATA_DIR)
_TEST_CONFIG_FILE = _TEST_DATA_DIR / "config.yaml"

_TEST_CONFIG_FILE.write_text(
    yaml.safe_dump(
        {"log_level": "DEBUG", "web": {"enabled": False}},
        sort_keys=False,
    ),
    encoding="utf-8",
)

from mediashelf.config import settings as settings_module  # noqa: E402
from mediashelf.config.database import MediaShelfDB  # noqa: E402
from mediashelf.config.settings import MediaShelfConfig  # noqa: E402
from mediashelf.core.library import LibraryStore  # noqa: E402
from mediashelf.web.services.library_service import LibraryService  # noqa: E402

settings_module.get_config.cache_clear()


@pytest.fixture
def database(tmp_path: Path):
    """Provide an empty database in a per-test directory."""
    db = MediaShelfDB(tmp_path / "db", migrate=False)
    yield db
    db.dispose()


@pytest.fixture
def session(database: MediaShelfDB):
    """Provide an open session on the per-test database."""
    with database() as ctx:
        yield ctx.session


@pytest.fixture
def store(session) -> LibraryStore:
    """Provide a LibraryStore bound to the per-test session."""
    return LibraryStore(session)


@pytest.fixture
def service_config() -> MediaShelfConfig:
    """Configuration used by the library service fixture."""
    return MediaShelfConfig(seed_default_lists=False)


@pytest.fixture
def library_service(
    database: MediaShelfDB, service_config: MediaShelfConfig
) -> LibraryService:
    """Provide a LibraryService writing to the per-test database."""
    return LibraryService(
        database=lambda: database, config=lambda: service_config
    )


@atexit.register
def _cleanup_test_data_dir() -> None:
    """Remove the temporary test data directory after the test session."""
    shutil.rmtree(_TEST_DATA_DIR, ignore_errors=True)
