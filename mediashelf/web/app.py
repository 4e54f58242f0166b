"""FastAPI application factory and setup."""

from fastapi.applications import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request

from mediashelf import __version__
from mediashelf.exceptions import LibraryValidationError, MediaShelfError
from mediashelf.utils.logging import get_logger
from mediashelf.web.routes import router

__all__ = ["create_app"]

log = get_logger()


def create_app() -> FastAPI:
    """Create the FastAPI application.

    Returns:
        FastAPI: The created FastAPI application.
    """
    app = FastAPI(title="MediaShelf", version=__version__)
    app.include_router(router)

    @app.exception_handler(LibraryValidationError)
    async def validation_exception_handler(
        request: Request, exc: LibraryValidationError
    ) -> JSONResponse:
        """Report every problem found in a refused library snapshot.

        Args:
            request (Request): The incoming HTTP request.
            exc (LibraryValidationError): The exception instance.

        Returns:
            JSONResponse: The validation messages.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": "Invalid library data", "errors": exc.errors},
        )

    @app.exception_handler(MediaShelfError)
    async def domain_exception_handler(
        request: Request, exc: MediaShelfError
    ) -> JSONResponse:
        """Handle MediaShelf errors with structured JSON responses.

        Args:
            request (Request): The incoming HTTP request.
            exc (MediaShelfError): The exception instance.

        Returns:
            JSONResponse: Structured JSON response with error details.
        """
        cls = exc.__class__
        if cls.status_code >= 500:
            log.error(f"Web: {request.method} {request.url.path} failed: {exc}")
        payload = {
            "error": cls.__name__,
            "detail": str(exc) or cls.__doc__ or "",
            "path": request.url.path,
        }
        return JSONResponse(status_code=cls.status_code, content=payload)

    return app
