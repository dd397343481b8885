"""Application errors and their HTTP rendering.

Every error the API returns is a JSON object with a `message` key. Handlers raise the
subclasses below; `register_exception_handlers` maps them (and anything unexpected) to
responses.
"""

from __future__ import annotations

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class Conflict(BadRequest):
    """Duplicate unique value (the API reports it as 400)."""

    default_message = "User already exists"


class InvalidCredentials(BadRequest):
    default_message = "Invalid credentials"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class NotConfigured(ApiError):
    """An optional integration (e.g. payments) is not configured."""

    status_code = 501
    default_message = "Service not configured"


def register_exception_handlers(app: FastAPI, *, expose_stack: bool) -> None:
    """Install the JSON error contract on an app.

    - ApiError subclasses -> their status + {"message"}
    - unmatched routes / framework HTTP errors -> {"message"}
    - body/query validation -> 400 {"message", "errors"}
    - anything else -> 500 {"message"} (+ "stack" when expose_stack)
    """

    @app.exception_handler(ApiError)
    async def _api_error(_request: Request, exc: ApiError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            message = "Route not found"
        else:
            message = str(exc.detail or "Request failed")
        return JSONResponse(status_code=exc.status_code, content={"message": message})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in e.get("loc", ())[1:]), "error": e.get("msg", "")}
            for e in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        body: Dict[str, Any] = {"message": str(exc) or "Internal server error"}
        if expose_stack:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=body)
