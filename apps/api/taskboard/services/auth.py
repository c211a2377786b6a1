"""Authentication service layer."""

from __future__ import annotations

import logging

from taskboard.adapters.auth import TokenProvider
from taskboard.adapters.passwords import CredentialHasher
from taskboard.core.logging_safety import safe_log_identifier
from taskboard.core.validation import PasswordPolicy
from taskboard.errors import ApiError, unauthenticated, validation_failed
from taskboard.repositories.memory import DuplicateEmailError, InMemoryStore, PersistenceError, UserRecord
from taskboard.schemas.auth import AuthPrincipal, AuthSession, CurrentUser, UserProfile, UserSummary

REGISTRATION_FAILED = "Registration failed"
LOGIN_FAILED = "Login failed"
INVALID_CREDENTIALS = "The provided credentials are incorrect"
EMAIL_TAKEN = "The email has already been taken."
CONFIRMATION_MISMATCH = "The password field confirmation does not match."

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        store: InMemoryStore,
        hasher: CredentialHasher,
        tokens: TokenProvider,
        policy: PasswordPolicy,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._policy = policy

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        password_confirmation: str | None,
    ) -> AuthSession:
        errors: dict[str, list[str]] = {}
        if self._store.find_user_by_email(email) is not None:
            errors["email"] = [EMAIL_TAKEN]

        password_errors: list[str] = []
        if password_confirmation != password:
            password_errors.append(CONFIRMATION_MISMATCH)
        password_errors.extend(self._policy.violations(password))
        if password_errors:
            errors["password"] = password_errors

        if errors:
            raise validation_failed(errors, REGISTRATION_FAILED)

        try:
            user = self._store.create_user(name=name, email=email, password_hash=self._hasher.hash(password))
        except DuplicateEmailError as exc:
            # Lost a race against a concurrent registration for the same address.
            raise validation_failed({"email": [EMAIL_TAKEN]}, REGISTRATION_FAILED) from exc

        try:
            issued = self._tokens.issue_token(user.id)
        except PersistenceError:
            # A registered user always has its first token.
            self._store.delete_user(user.id)
            logger.error(
                "auth.register_rolled_back user_id=%s",
                safe_log_identifier(user.id, prefix="uid"),
            )
            raise

        logger.info(
            "auth.registered user_id=%s token_id=%s",
            safe_log_identifier(user.id, prefix="uid"),
            safe_log_identifier(issued.token_id, prefix="tid"),
        )
        return AuthSession(user=self._to_summary(user), token=issued.plain_text)

    def login(self, *, email: str, password: str) -> AuthSession:
        user = self._store.find_user_by_email(email)
        if user is None or not self._hasher.verify(user.password_hash, password):
            logger.warning(
                "auth.login_failed email=%s reason=%s",
                safe_log_identifier(email, prefix="em"),
                "unknown_email" if user is None else "password_mismatch",
            )
            raise ApiError(status_code=401, message=INVALID_CREDENTIALS)

        issued = self._tokens.issue_token(user.id)
        logger.info(
            "auth.login user_id=%s token_id=%s",
            safe_log_identifier(user.id, prefix="uid"),
            safe_log_identifier(issued.token_id, prefix="tid"),
        )
        return AuthSession(user=self._to_summary(user), token=issued.plain_text)

    def logout(self, *, principal: AuthPrincipal) -> None:
        self._tokens.revoke_token(principal.token_id)
        logger.info(
            "auth.logout user_id=%s token_id=%s",
            safe_log_identifier(principal.user_id, prefix="uid"),
            safe_log_identifier(principal.token_id, prefix="tid"),
        )

    def current_user(self, *, principal: AuthPrincipal) -> CurrentUser:
        user = self._store.get_user(principal.user_id)
        if user is None:
            raise unauthenticated()

        return CurrentUser(
            user=UserProfile(
                id=user.id,
                name=user.name,
                email=user.email,
                created_at=user.created_at,
                updated_at=user.updated_at,
            )
        )

    @staticmethod
    def _to_summary(user: UserRecord) -> UserSummary:
        return UserSummary(id=user.id, name=user.name, email=user.email)
