"""Library export and import API endpoints."""

from typing import Any

from fastapi import APIRouter, Body
from pydantic import BaseModel

from mediashelf.exceptions import LibraryValidationError
from mediashelf.web.services.library_service import get_library_service

router = APIRouter()


class LibraryResponse(BaseModel):
    """Response model carrying a library snapshot."""

    message: str
    library: dict[str, Any]


@router.get("/{owner_id}/export", response_model=LibraryResponse)
def export_library(owner_id: int) -> LibraryResponse:
    """Export an owner's library.

    Args:
        owner_id (int): Id of the library owner

    Returns:
        LibraryResponse: The owner's library snapshot
    """
    snapshot = get_library_service().export_library(owner_id)
    return LibraryResponse(
        message="Library exported successfully", library=snapshot.to_payload()
    )


@router.post("/{owner_id}/import", response_model=LibraryResponse)
def import_library(owner_id: int, data: Any = Body(...)) -> LibraryResponse:
    """Import a library snapshot into an owner's library.

    The body is validated as a whole; when it is refused nothing is written and
    every problem found is reported.

    Args:
        owner_id (int): Id of the library owner
        data (Any): Library snapshot with ``mediaItems`` and ``lists``

    Returns:
        LibraryResponse: The owner's library after reconciliation
    """
    result = get_library_service().import_library(owner_id, data)
    if not result.ok or result.library is None:
        raise LibraryValidationError(result.errors)
    return LibraryResponse(
        message="Library imported successfully", library=result.library.to_payload()
    )
