"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from typing import Any, NamedTuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.core.config import get_settings
from taskboard.core.logging_safety import safe_log_identifier
from taskboard.core.responses import (
    error_response,
    forbidden_response,
    not_found_response,
    server_error_response,
    unauthorized_response,
    validation_error_response,
)
from taskboard.core.validation import format_validation_errors
from taskboard.errors import ApiError
from taskboard.repositories.memory import InMemoryStore, PersistenceError
from taskboard.routes import auth as auth_routes
from taskboard.routes import auth_router, tasks_router
from taskboard.routes import tasks as task_routes
from taskboard.routes.dependencies import request_correlation_id
from taskboard.services.auth import LOGIN_FAILED, REGISTRATION_FAILED

logger = logging.getLogger(__name__)

_DEBUG_TRACE_DEPTH = 5
_DEFAULT_VALIDATION_MESSAGE = "Validation failed"


class RouteMessages(NamedTuple):
    validation: str
    server_error: str


# Keyed by endpoint function so the lookup does not depend on router prefixes.
_ROUTE_MESSAGES: dict[Callable[..., Any], RouteMessages] = {
    auth_routes.register: RouteMessages(REGISTRATION_FAILED, "An error occurred during registration"),
    auth_routes.login: RouteMessages(LOGIN_FAILED, "An error occurred during login"),
    auth_routes.logout: RouteMessages(_DEFAULT_VALIDATION_MESSAGE, "An error occurred during logout"),
    auth_routes.me: RouteMessages(_DEFAULT_VALIDATION_MESSAGE, "An error occurred while retrieving user details"),
    task_routes.list_tasks: RouteMessages("Invalid filter parameters", "An error occurred while retrieving tasks"),
    task_routes.create_task: RouteMessages("Task creation failed", "An error occurred while creating the task"),
    task_routes.show_task: RouteMessages(_DEFAULT_VALIDATION_MESSAGE, "An error occurred while retrieving the task"),
    task_routes.update_task: RouteMessages("Task update failed", "An error occurred while updating the task"),
    task_routes.delete_task: RouteMessages(_DEFAULT_VALIDATION_MESSAGE, "An error occurred while deleting the task"),
}

_HTTP_ERROR_MESSAGES: dict[int, tuple[str, str]] = {
    404: ("Not found.", "The requested endpoint does not exist."),
    405: ("Method not allowed.", "The HTTP method used is not supported for this endpoint."),
    429: ("Too many requests.", "You have exceeded the rate limit. Please try again later."),
}

_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/register": {"post": {"201", "422", "500"}},
    "/api/login": {"post": {"200", "401", "422", "500"}},
    "/api/logout": {"post": {"200", "401", "500"}},
    "/api/me": {"get": {"200", "401", "500"}},
    "/api/tasks": {
        "get": {"200", "401", "422", "500"},
        "post": {"201", "401", "422", "500"},
    },
    "/api/tasks/{task_id}": {
        "get": {"200", "401", "403", "404", "500"},
        "put": {"200", "401", "403", "404", "422", "500"},
        "patch": {"200", "401", "403", "404", "422", "500"},
        "delete": {"200", "401", "403", "404", "500"},
    },
}


def _route_messages(request: Request) -> RouteMessages | None:
    return _ROUTE_MESSAGES.get(request.scope.get("endpoint"))


def _api_error_response(exc: ApiError) -> JSONResponse:
    if exc.status_code == 401:
        return unauthorized_response(exc.message, error=exc.error)
    if exc.status_code == 403:
        return forbidden_response(exc.message, error=exc.error)
    if exc.status_code == 404:
        return not_found_response(exc.message, error=exc.error)
    if exc.status_code == 422 and exc.errors is not None:
        return validation_error_response(exc.errors, exc.message)
    return error_response(exc.message, exc.status_code, errors=exc.errors, error=exc.error)


def _debug_details(exc: BaseException) -> dict[str, Any]:
    frames = traceback.extract_tb(exc.__traceback__)
    origin = frames[-1] if frames else None
    return {
        "exception": f"{type(exc).__module__}.{type(exc).__qualname__}",
        "file": origin.filename if origin else None,
        "line": origin.lineno if origin else None,
        "trace": [
            {"file": frame.filename, "line": frame.lineno, "function": frame.name}
            for frame in reversed(frames[-_DEBUG_TRACE_DEPTH:])
        ],
    }


def _apply_contract_response_codes(schema: dict) -> None:
    """Document only the status codes each operation can actually produce."""
    error_ref = {"$ref": "#/components/schemas/ErrorEnvelope"}
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                response = responses.setdefault(status_code, {"description": "See API contract"})
                if status_code.startswith(("4", "5")) and "content" not in response:
                    response["content"] = {"application/json": {"schema": dict(error_ref)}}


def create_app() -> FastAPI:
    app = FastAPI(title="Taskboard API", version="1.0.0")
    app.state.store = InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return _api_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = _route_messages(request)
        errors = format_validation_errors(exc.errors())
        logger.info(
            "request.validation_failed method=%s path=%s fields=%s",
            request.method,
            request.url.path,
            ",".join(errors),
        )
        return validation_error_response(
            errors,
            messages.validation if messages else _DEFAULT_VALIDATION_MESSAGE,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_, exc: StarletteHTTPException) -> JSONResponse:
        message, detail = _HTTP_ERROR_MESSAGES.get(exc.status_code, (str(exc.detail), None))
        if exc.status_code == 404:
            return not_found_response(message, error=detail)
        return error_response(message, exc.status_code, error=detail, headers=exc.headers)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
        settings = get_settings()
        messages = _route_messages(request)
        logger.error(
            "request.persistence_failed correlation_id=%s method=%s path=%s error=%s",
            safe_log_identifier(request_correlation_id(request), prefix="cid"),
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        return server_error_response(
            messages.server_error if messages else "Database error.",
            error=str(exc) if settings.debug else "A database error occurred. Please try again later.",
            debug=_debug_details(exc) if settings.debug else None,
        )

    # Registered for Exception, so Starlette's ServerErrorMiddleware renders it;
    # the exception is still re-raised there for the server to log.
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        settings = get_settings()
        messages = _route_messages(request)
        logger.exception(
            "request.unhandled_error correlation_id=%s method=%s path=%s",
            safe_log_identifier(request_correlation_id(request), prefix="cid"),
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return server_error_response(
            messages.server_error if messages else "Server error.",
            error=str(exc) if settings.debug else "An unexpected error occurred. Please try again later.",
            debug=_debug_details(exc) if settings.debug else None,
        )

    api_prefix = "/api"
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(tasks_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
