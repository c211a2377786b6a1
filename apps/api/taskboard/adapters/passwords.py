"""Credential hashing adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from taskboard.core.config import Settings


class CredentialHasher(ABC):
    """Hashes passwords and checks candidates against stored hashes."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return an encoded hash suitable for storage."""

    @abstractmethod
    def verify(self, password_hash: str, password: str) -> bool:
        """Return whether ``password`` matches ``password_hash``."""


class Argon2CredentialHasher(CredentialHasher):
    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._hasher = hasher or PasswordHasher()

    @classmethod
    def from_settings(cls, settings: Settings) -> Argon2CredentialHasher:
        return cls(
            PasswordHasher(
                time_cost=settings.password_hash_time_cost,
                memory_cost=settings.password_hash_memory_cost,
                parallelism=settings.password_hash_parallelism,
            )
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        # argon2 compares in constant time and raises on any mismatch.
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False


__all__ = ["Argon2CredentialHasher", "CredentialHasher"]
