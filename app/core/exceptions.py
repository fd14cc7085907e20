from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class LibraryError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "internal_error"
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(LibraryError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_detail = "Not found"


class CatalogNotFoundError(NotFoundError):
    default_detail = "Book not found"


class ConflictError(LibraryError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_detail = "Already exists"


class LibraryValidationError(LibraryError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"
    default_detail = "Bad request"


class AuthenticationError(LibraryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"
    default_detail = "Invalid credentials"


class PermissionDeniedError(LibraryError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_detail = "Access denied"


class UpstreamError(LibraryError):
    """The catalog answered with something other than a usable result."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "upstream_error"
    default_detail = "Catalog service error"

    def __init__(self, detail: str | None = None, upstream_status: int | None = None):
        super().__init__(detail)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(UpstreamError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "upstream_timeout"
    default_detail = "Request to Google Books API timed out"


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.error_code} on {request.url.path}: {exc.detail}")
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.error_code},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LibraryError, library_error_handler)
