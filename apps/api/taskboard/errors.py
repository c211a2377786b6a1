"""Application exception types."""

from __future__ import annotations

UNAUTHENTICATED_MESSAGE = "Unauthenticated."
UNAUTHENTICATED_DETAIL = "Please login to access this resource."


class ApiError(Exception):
    """Expected failure that maps directly onto an error envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
        error: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.errors = errors
        self.error = error
        super().__init__(message)


def validation_failed(errors: dict[str, list[str]], message: str = "Validation failed") -> ApiError:
    return ApiError(status_code=422, message=message, errors=errors)


def unauthenticated() -> ApiError:
    return ApiError(status_code=401, message=UNAUTHENTICATED_MESSAGE, error=UNAUTHENTICATED_DETAIL)


def forbidden(message: str = "Forbidden") -> ApiError:
    return ApiError(status_code=403, message=message)


def not_found(message: str = "Resource not found") -> ApiError:
    return ApiError(status_code=404, message=message)


__all__ = [
    "ApiError",
    "UNAUTHENTICATED_DETAIL",
    "UNAUTHENTICATED_MESSAGE",
    "forbidden",
    "not_found",
    "unauthenticated",
    "validation_failed",
]
