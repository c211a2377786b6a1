"""Authentication provider interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from taskboard.schemas.auth import AuthPrincipal


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified or normalized."""


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token_id: str
    plain_text: str


class TokenProvider(ABC):
    """Issues, verifies and revokes per-session bearer tokens."""

    @abstractmethod
    def issue_token(self, user_id: str) -> IssuedToken:
        """Create a new session token; the plain text is only available here."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return normalized principal."""

    @abstractmethod
    def revoke_token(self, token_id: str) -> None:
        """Revoke a single session token."""


__all__ = ["AuthVerificationError", "IssuedToken", "TokenProvider"]
