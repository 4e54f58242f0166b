"""Library import and export for a single owner."""

from mediashelf.core.library.exporter import export_library
from mediashelf.core.library.importer import ImportResult, LibraryImporter
from mediashelf.core.library.store import LibraryStore
from mediashelf.core.library.validator import validate_library_data

__all__ = [
    "ImportResult",
    "LibraryImporter",
    "LibraryStore",
    "export_library",
    "validate_library_data",
]
