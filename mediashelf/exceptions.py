"""MediaShelf exception classes."""


class MediaShelfError(Exception):
    """Base class for all MediaShelf exceptions."""

    # Default HTTP status for API responses
    status_code: int = 500


# Configuration errors
class ConfigError(MediaShelfError):
    """Base class for configuration-related errors."""

    status_code = 500


class DataPathError(ConfigError, ValueError):
    """The configured data directory path is invalid for the requested operation."""

    status_code = 500


# Owner errors
class OwnerError(MediaShelfError):
    """Base class for owner (user) related errors."""

    status_code = 400


class OwnerNotFoundError(OwnerError, KeyError):
    """The owner whose library is being read or written does not exist."""

    status_code = 404

    def __str__(self) -> str:
        """Return the message without KeyError's repr quoting."""
        return str(self.args[0]) if self.args else ""


# Library import/export errors
class LibraryError(MediaShelfError):
    """Base class for library import and export failures."""

    status_code = 500


class LibraryValidationError(LibraryError, ValueError):
    """A library snapshot failed structural or referential validation.

    All collected messages are available on ``errors``.
    """

    status_code = 400

    def __init__(self, errors: list[str]) -> None:
        """Store the collected validation messages."""
        self.errors = list(errors)
        super().__init__(
            f"Library data is invalid ({len(self.errors)} error(s)): "
            + "; ".join(self.errors[:5])
        )


class LibraryImportError(LibraryError):
    """The backing store failed while a library import was being applied."""

    status_code = 500


class ImportTimeoutError(LibraryError, TimeoutError):
    """A library import did not finish before its deadline."""

    status_code = 504
