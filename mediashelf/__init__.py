"""MediaShelf: personal book and movie library."""

from mediashelf.utils.version import get_pyproject_version

__author__ = "MediaShelf Contributors"
__license__ = "MIT"
__version__ = get_pyproject_version()
