"""
Error taxonomy shared by every route, and the handlers that turn it into JSON.

Routes raise these exceptions; the handlers registered in ``register_exception_handlers``
are the only place where an error becomes an HTTP response. The body is always
``{"success": false, "error": <message>}`` plus any extra fields the error carries.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StudioError(Exception):
    status_code: int = 500

    def __init__(self, message: str, /, *, status_code: int | None = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_body(self) -> dict[str, Any]:
        return {"success": False, "error": self.message, **self.extra}


class BadRequestError(StudioError):
    status_code = 400


class NotFoundError(StudioError):
    status_code = 404


class ConflictError(StudioError):
    status_code = 409


class RateLimitedError(StudioError):
    status_code = 429


class ConfigurationError(StudioError):
    """A provider is required but its credentials are not configured."""

    status_code = 503


class ProviderTimeoutError(StudioError):
    status_code = 504


class ProviderError(StudioError):
    """
    A third-party provider call failed: non-2xx status, or a body that could not be parsed.
    `upstream_status` and `raw_response` are kept for diagnosis.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        upstream_status: int | None = None,
        raw_response: str | None = None,
        status_code: int | None = None,
    ):
        extra: dict[str, Any] = {"provider": provider}
        if raw_response is not None:
            extra["rawResponse"] = raw_response
        super().__init__(message, status_code=status_code, **extra)
        self.provider = provider
        self.upstream_status = upstream_status
        self.raw_response = raw_response

    @property
    def is_rate_limited(self) -> bool:
        return self.upstream_status == 429 or "rate limit" in self.message.lower()


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form")]
    field = ".".join(loc) or "request body"
    if first.get("type") == "missing":
        return f"Missing required field: {field}"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}"


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(exc)
    logger.info("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"success": False, "error": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudioError, studio_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
