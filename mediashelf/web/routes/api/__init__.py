"""API routes."""

from fastapi.routing import APIRouter

from mediashelf.web.routes.api.library import router as library_router

__all__ = ["router"]

router = APIRouter()

router.include_router(library_router, prefix="/library", tags=["library"])
