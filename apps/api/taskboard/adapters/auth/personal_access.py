"""Store-backed personal access tokens."""

from __future__ import annotations

import hashlib
import secrets

from taskboard.adapters.auth.base import AuthVerificationError, IssuedToken, TokenProvider
from taskboard.repositories.memory import InMemoryStore
from taskboard.schemas.auth import AuthPrincipal

TOKEN_NAME = "auth_token"
_SECRET_BYTES = 20


def _hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class PersonalAccessTokenProvider(TokenProvider):
    """Opaque ``<token id>|<secret>`` tokens; only the secret's sha256 is stored."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def issue_token(self, user_id: str) -> IssuedToken:
        secret = secrets.token_hex(_SECRET_BYTES)
        record = self._store.create_token(user_id=user_id, name=TOKEN_NAME, token_hash=_hash_secret(secret))
        return IssuedToken(token_id=record.id, plain_text=f"{record.id}|{secret}")

    def verify_token(self, token: str) -> AuthPrincipal:
        token_id, separator, secret = token.partition("|")
        if not separator or not token_id or not secret:
            raise AuthVerificationError("Malformed bearer token")

        record = self._store.get_token(token_id)
        if record is None or not secrets.compare_digest(record.token_hash, _hash_secret(secret)):
            raise AuthVerificationError("Invalid bearer token")
        if self._store.get_user(record.user_id) is None:
            raise AuthVerificationError("Bearer token owner no longer exists")

        self._store.touch_token(record)
        return AuthPrincipal(user_id=record.user_id, token_id=record.id)

    def revoke_token(self, token_id: str) -> None:
        self._store.delete_token(token_id)


__all__ = ["PersonalAccessTokenProvider", "TOKEN_NAME"]
