"""Uniform JSON response envelopes.

Every body carries ``success`` and ``message``. Success bodies add ``data``
only when there is a payload; error bodies add ``errors`` (field-keyed
messages) and ``error`` (a short detail) only when they are provided.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import URL

from taskboard.core.pagination import Page


def success_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = 200,
) -> JSONResponse:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=body)


def created_response(data: Any, message: str = "Resource created successfully") -> JSONResponse:
    return success_response(data, message, 201)


def no_content_response() -> Response:
    return Response(status_code=204)


def paginated_response(page: Page[Any], *, url: URL, message: str = "Success") -> JSONResponse:
    body = {
        "success": True,
        "message": message,
        "data": jsonable_encoder(page.items),
        "meta": page.meta().model_dump(mode="json", by_alias=True),
        "links": page.links(url).model_dump(mode="json"),
    }
    return JSONResponse(status_code=200, content=body)


def error_response(
    message: str = "Error",
    status_code: int = 400,
    *,
    errors: Mapping[str, list[str]] | None = None,
    error: str | None = None,
    debug: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = dict(errors)
    if error is not None:
        body["error"] = error
    if debug is not None:
        body["debug"] = jsonable_encoder(debug)
    return JSONResponse(status_code=status_code, content=body, headers=dict(headers) if headers else None)


def unauthorized_response(message: str = "Unauthorized", *, error: str | None = None) -> JSONResponse:
    return error_response(message, 401, error=error)


def forbidden_response(message: str = "Forbidden", *, error: str | None = None) -> JSONResponse:
    return error_response(message, 403, error=error)


def not_found_response(message: str = "Resource not found", *, error: str | None = None) -> JSONResponse:
    return error_response(message, 404, error=error)


def validation_error_response(
    errors: Mapping[str, list[str]],
    message: str = "Validation failed",
) -> JSONResponse:
    return error_response(message, 422, errors=errors)


def server_error_response(
    message: str = "Internal server error",
    *,
    error: str | None = None,
    debug: Mapping[str, Any] | None = None,
) -> JSONResponse:
    return error_response(message, 500, error=error, debug=debug)
