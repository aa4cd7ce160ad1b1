"""
Application exceptions and the handlers that render them.

Services raise these instead of returning error values; the handlers
registered in ``register_exception_handlers`` turn every failure into the
``{"error": "<message>"}`` body the frontend expects.

    NyonjoError (base)  -> 500
    ├── ValidationError -> 400
    ├── NotFoundError   -> 404
    ├── AuthError       -> 401
    └── StorageError    -> 500
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class NyonjoError(Exception):
    """Base for all application errors.

    ``message`` is safe to show to clients; ``context`` is only logged.
    """

    status_code = 500

    def __init__(self, message: str = "Internal server error", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NyonjoError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NyonjoError):
    status_code = 404

    def __init__(self, resource: str = "Resource", resource_id: Optional[Any] = None):
        super().__init__(
            message=f"{resource} not found",
            context={"resource": resource, "resource_id": resource_id},
        )


class AuthError(NyonjoError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message)


class StorageError(NyonjoError):
    """Object storage call failed (upload, delete)."""

    status_code = 500


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NyonjoError)
    async def handle_app_error(request: Request, exc: NyonjoError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s | %s", request.method, request.url.path, exc.message, exc.context)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            message = "Invalid request"
        return error_response(400, message)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, "Internal server error")
