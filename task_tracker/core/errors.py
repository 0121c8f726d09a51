from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


@dataclass
class ApiError(Exception):
    status_code: int
    message: str
    errors: Optional[Dict[str, List[str]]] = None
    headers: Optional[Dict[str, str]] = None

    def __str__(self) -> str:
        base = f"API error {self.status_code}: {self.message}"
        if self.errors:
            return base + f" | fields={sorted(self.errors)}"
        return base

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        return body


@dataclass
class Unauthenticated(ApiError):
    status_code: int = status.HTTP_401_UNAUTHORIZED
    message: str = "Unauthenticated."
    headers: Optional[Dict[str, str]] = field(
        default_factory=lambda: {"WWW-Authenticate": "Bearer"}
    )


@dataclass
class InvalidCredentials(ApiError):
    status_code: int = status.HTTP_401_UNAUTHORIZED
    message: str = "Invalid credentials"


@dataclass
class NotFound(ApiError):
    """Нет ресурса ИЛИ ресурс чужой: снаружи эти случаи неразличимы."""

    status_code: int = status.HTTP_404_NOT_FOUND
    message: str = "Not found."


@dataclass
class ValidationFailed(ApiError):
    status_code: int = 422
    message: str = "The given data was invalid."
    errors: Optional[Dict[str, List[str]]] = field(default_factory=dict)


# ====== приведение ошибок pydantic к {field: [messages]} ======

_LOCATION_PREFIXES = ("body", "query", "path", "header")


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:] or parts
    return ".".join(parts) if parts else "body"


def _message(error: Dict[str, Any], field_name: str) -> str:
    kind = error.get("type", "")
    if kind == "missing":
        return f"The {field_name} field is required."
    if kind == "enum":
        return f"The selected {field_name} is invalid."
    if kind.startswith("date"):
        return f"The {field_name} field must be a valid date."
    if kind == "value_error":
        ctx = error.get("ctx") or {}
        if "error" in ctx:
            return str(ctx["error"])
        if "reason" in ctx:
            # EmailStr
            return f"The {field_name} field must be a valid email address."
    return error.get("msg", "Invalid value.")


def field_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Собирает ВСЕ ошибки по полям, а не только первую."""
    result: Dict[str, List[str]] = {}
    for error in errors:
        name = _field_name(error.get("loc", ()))
        message = _message(error, name)
        messages = result.setdefault(name, [])
        if message not in messages:
            messages.append(message)
    return result


# ====== обработчики ======

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await api_error_handler(request, ValidationFailed(errors=field_errors(exc.errors())))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
