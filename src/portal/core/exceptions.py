"""Exception handlers with request_id in responses."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.portal.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PortalError,
    ProvisioningError,
    ValidationError,
)
from src.portal.core.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[PortalError], int]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_CONTENT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ProvisioningError, status.HTTP_502_BAD_GATEWAY),
]


def status_for_error(exc: PortalError) -> int:
    """Map a domain error to its HTTP status code.

    A gate denial for a missing identity is a 401; any other denial is a 403.
    """
    if isinstance(exc, AuthorizationError) and exc.reason == "unauthenticated":
        return status.HTTP_401_UNAUTHORIZED
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=exc.headers,
        )

    @app.exception_handler(PortalError)
    async def portal_exception_handler(request: Request, exc: PortalError) -> JSONResponse:
        content: dict[str, object] = {
            "detail": exc.message,
            "request_id": correlation_id.get(),
        }
        if isinstance(exc, AuthorizationError):
            content["reason"] = exc.reason
        if isinstance(exc, ProvisioningError):
            # Generic retry prompt; the application id lets an operator reconcile
            content["detail"] = "Account provisioning failed. Please retry."
            if exc.inconsistent_application_id is not None:
                content["inconsistent_application_id"] = str(exc.inconsistent_application_id)
            logger.warning("Provisioning error returned to client", error=exc.message)
        elif isinstance(exc, ValidationError) and exc.inconsistent_application_id is not None:
            content["inconsistent_application_id"] = str(exc.inconsistent_application_id)
        return JSONResponse(status_code=status_for_error(exc), content=content)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
