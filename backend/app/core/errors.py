# app/core/errors.py
"""
Error taxonomy and the centralized error formatter.

Handlers raise one of the APIError subclasses below (or let pydantic/Tortoise
raise); the exception handlers registered by `register_exception_handlers`
turn every failure into the JSON envelope `{"error": ..., "details": ...}`.
"""
import logging
import math
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise.exceptions import DoesNotExist, IntegrityError

logger = logging.getLogger("uvicorn.error")

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class APIError(HTTPException):
    """HTTPException carrying a client-facing message and optional details."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Any = None, status_code: int | None = None):
        super().__init__(status_code=status_code or self.status_code, detail=message)
        self.message = message
        self.details = details


class BadRequest(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(APIError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(APIError):
    status_code = status.HTTP_409_CONFLICT


# Upload constraint violations are reported as 400 with a details object
class PayloadTooLarge(BadRequest):
    pass


class TooManyFiles(BadRequest):
    pass


class InvalidFileType(BadRequest):
    pass


def _field_name(loc: tuple | list) -> str:
    """
    Turn a pydantic error location into a flat field name.

    ("body", "categoryIds", 0) -> "categoryIds[0]"; ("query", "page") -> "page"
    """
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    name = ""
    for part in parts:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name = f"{name}.{part}" if name else str(part)
    return name


def _message(err: dict) -> str:
    msg = err.get("msg", "Invalid value")
    # Custom validators raise ValueError; pydantic prefixes their text
    if err.get("type") == "value_error" and msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


def _echo(value: Any) -> Any:
    """Rejected input as JSON can carry it (NaN and Infinity become strings)."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _echo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_echo(v) for v in value]
    return value


def format_validation_errors(errors: list[dict]) -> list[dict]:
    """
    Convert pydantic error dicts into `[{field, message, value}]`.

    Every failing field is reported, not just the first one.
    """
    details = []
    for err in errors:
        value = None if err.get("type") == "missing" else err.get("input")
        details.append({
            "field": _field_name(err.get("loc", ())),
            "message": _message(err),
            "value": _echo(value),
        })
    return jsonable_encoder(details, custom_encoder={bytes: lambda b: None})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": format_validation_errors(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body: dict[str, Any] = {"error": exc.detail}
    details = getattr(exc, "details", None)
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def integrity_error_handler(request: Request, exc: IntegrityError):
    # Unique constraint hit after an advisory pre-check lost a race
    logger.warning("[db] integrity error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": "Resource already exists"})


async def does_not_exist_handler(request: Request, exc: DoesNotExist):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Resource not found"})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the centralized error formatter on the application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(DoesNotExist, does_not_exist_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
