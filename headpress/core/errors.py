# headpress/core/errors.py
"""
WordPress-style error envelope.

Every error leaving the API has the shape ``{code, message, data: {status}}``.
Handlers raise the ``WPError`` subclasses below; ``register_exception_handlers``
renders them (and framework errors) at the boundary.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class WPError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "rest_error"

    def __init__(self, message: str, code: str = None, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status_code},
        }


class Unauthenticated(WPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "rest_not_logged_in"


class Forbidden(WPError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "rest_forbidden"


class NotFound(WPError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "rest_not_found"


class InvalidParameter(WPError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "rest_invalid_param"


class Conflict(WPError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "rest_conflict"


class NotImplementedOperation(WPError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    default_code = "rest_trash_not_supported"


class UpstreamFailure(WPError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "rest_upstream_failure"


def error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": message, "data": {"status": status_code}},
    )


def _field_name(loc) -> str:
    # ("body", "title") -> "title"; ("query", "page") -> "page"
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or str(loc[-1])


def register_exception_handlers(app: FastAPI) -> None:
    """
    Installs the handlers that turn every error into the WordPress envelope.
    """

    @app.exception_handler(WPError)
    async def wp_error_handler(request: Request, exc: WPError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.code}: {exc.message}",
                extra={
                    "error_code": exc.code,
                    "endpoint": request.url.path,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        missing = [_field_name(err["loc"]) for err in errors if err.get("type") == "missing"]
        if missing:
            return error_response(
                "rest_missing_callback_param",
                f"Missing parameter(s): {', '.join(missing)}",
                status.HTTP_400_BAD_REQUEST,
            )
        invalid = sorted({_field_name(err["loc"]) for err in errors})
        return error_response(
            "rest_invalid_param",
            f"Invalid parameter(s): {', '.join(invalid)}",
            status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(
                "rest_no_route",
                "No route was found matching the URL and request method.",
                exc.status_code,
            )
        return error_response(f"http_{exc.status_code}", str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(
            f"Unhandled error on {request.method} {request.url.path}",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return error_response(
            "rest_internal_error",
            "Internal server error.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
