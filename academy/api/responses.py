"""Response envelope helpers and exception handlers for the HTTP layer."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from academy.domain.errors import (
    ApiError,
    InvalidTimeFormat,
    StoreReadError,
    ValidationInputError,
)

logger = logging.getLogger(__name__)


def success(data: Any, message: str | None = None, status_code: int = 200) -> JSONResponse:
    """``{success: true, data, message}`` with camelCase model fields."""
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data), "message": message},
    )


def failure(status_code: int, message: str, details: Any = None, headers: dict | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "message": message}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def method_not_allowed(allowed: list[str]) -> JSONResponse:
    """Fixed 405 response for methods an endpoint does not serve."""
    methods = ", ".join(allowed)
    return failure(
        405,
        f"Method not allowed. Allowed methods: {methods}",
        headers={"Allow": methods},
    )


def _field_errors(exc: RequestValidationError) -> ValidationInputError:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    fields = sorted({e["field"] for e in errors})
    return ValidationInputError(f"Invalid or missing fields: {', '.join(fields)}", errors)


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Map every error type onto the ``{success: false}`` envelope."""

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        return failure(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = _field_errors(exc)
        return failure(400, error.message, {"validationErrors": error.errors})

    @app.exception_handler(ValidationInputError)
    async def _validation_input(request: Request, exc: ValidationInputError) -> JSONResponse:
        return failure(400, exc.message, {"validationErrors": exc.errors} if exc.errors else None)

    @app.exception_handler(InvalidTimeFormat)
    async def _invalid_time(request: Request, exc: InvalidTimeFormat) -> JSONResponse:
        return failure(400, str(exc))

    @app.exception_handler(StoreReadError)
    async def _store_read(request: Request, exc: StoreReadError) -> JSONResponse:
        return failure(500, "Could not read schedules.", str(exc) if debug else None)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return failure(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return failure(500, "Internal server error.", {"error": str(exc)} if debug else None)
