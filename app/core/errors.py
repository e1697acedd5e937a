import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class StoreUnavailableError(StoreError):
    pass


class StoreCorruptedError(StoreError):
    pass


class EmailConflictError(StoreError):
    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class EmployeeNotFoundError(StoreError):
    def __init__(self, identifier: str):
        super().__init__(f"Employee not found: {identifier}")
        self.identifier = identifier


def envelope_error(status_code: int, message: str, headers: dict | None = None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
        headers=headers,
    )


def _describe_validation_error(err: dict) -> str:
    field = str(err["loc"][-1]) if err.get("loc") else "body"
    if err.get("type") in ("missing", "string_too_short"):
        return f"{field} required"
    return f"{field}: {err.get('msg', 'invalid value')}"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, message)
    return envelope_error(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [_describe_validation_error(e) for e in exc.errors()]
    logger.info("%s %s -> 400: %s", request.method, request.url.path, errors)
    return envelope_error(status.HTTP_400_BAD_REQUEST, ", ".join(errors) or "Invalid request", errors=errors)


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error("%s %s: store unavailable: %s", request.method, request.url.path, exc)
    return envelope_error(status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s error", request.method, request.url.path, exc_info=exc)
    return envelope_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
