"""Auth token adapters."""

from .base import AuthVerificationError, IssuedToken, TokenProvider
from .personal_access import PersonalAccessTokenProvider

__all__ = [
    "AuthVerificationError",
    "IssuedToken",
    "TokenProvider",
    "PersonalAccessTokenProvider",
]
