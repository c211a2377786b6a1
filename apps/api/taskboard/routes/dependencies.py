"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Path, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskboard.adapters.auth import AuthVerificationError, PersonalAccessTokenProvider, TokenProvider
from taskboard.adapters.passwords import Argon2CredentialHasher, CredentialHasher
from taskboard.core.config import Settings, get_settings
from taskboard.core.logging_safety import safe_log_identifier
from taskboard.core.validation import PasswordPolicy
from taskboard.errors import unauthenticated
from taskboard.repositories.memory import InMemoryStore, TaskRecord
from taskboard.schemas.auth import AuthPrincipal
from taskboard.services.auth import AuthService
from taskboard.services.tasks import TaskAction, TaskService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def request_correlation_id(request: Request) -> str:
    """Return the request correlation id, taking it from ``X-Correlation-Id`` or generating one."""
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_token_provider(store: Annotated[InMemoryStore, Depends(get_store)]) -> TokenProvider:
    return PersonalAccessTokenProvider(store)


def get_credential_hasher(settings: Annotated[Settings, Depends(get_settings)]) -> CredentialHasher:
    return Argon2CredentialHasher.from_settings(settings)


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    tokens: Annotated[TokenProvider, Depends(get_token_provider)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    safe_correlation_id = safe_log_identifier(request_correlation_id(request), prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthenticated()

    try:
        principal = tokens.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthenticated() from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


def get_auth_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    hasher: Annotated[CredentialHasher, Depends(get_credential_hasher)],
    tokens: Annotated[TokenProvider, Depends(get_token_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService(store, hasher, tokens, PasswordPolicy.from_settings(settings))


def get_task_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> TaskService:
    return TaskService(store)


def require_owned_task(action: TaskAction) -> Callable[..., TaskRecord]:
    """Build a dependency resolving ``task_id`` to a task the caller owns.

    Dependencies run before body validation, so a missing task (404) or a
    foreign task (403) is reported ahead of any payload errors.
    """

    def _resolve(
        task_id: Annotated[str, Path()],
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
        service: Annotated[TaskService, Depends(get_task_service)],
    ) -> TaskRecord:
        return service.get_owned_task(principal=principal, task_id=task_id, action=action)

    return _resolve
