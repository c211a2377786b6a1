"""In-memory repositories used by the API and tests."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from itertools import count
from typing import Any
from uuid import uuid4

from taskboard.schemas.task import TaskStatus

_UPDATABLE_TASK_FIELDS = frozenset({"title", "description", "status"})


class PersistenceError(Exception):
    """Raised when the store cannot complete a read or write."""


class DuplicateEmailError(PersistenceError):
    """Raised when a user is created with an email that is already registered."""


@dataclass(slots=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class AccessTokenRecord:
    id: str
    user_id: str
    name: str
    token_hash: str
    created_at: datetime
    last_used_at: datetime | None = None


@dataclass(slots=True)
class TaskRecord:
    id: str
    user_id: str
    title: str
    description: str | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    sequence: int = 0


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for the API and tests."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    user_ids_by_email: dict[str, str] = field(default_factory=dict)
    tokens: dict[str, AccessTokenRecord] = field(default_factory=dict)
    tasks: dict[str, TaskRecord] = field(default_factory=dict)
    user_write_count: int = 0
    task_write_count: int = 0
    fail_next_write: str | None = None
    _sequence: Iterator[int] = field(default_factory=lambda: count(1))
    _user_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def create_user(self, *, name: str, email: str, password_hash: str) -> UserRecord:
        self._maybe_raise_write_failpoint()
        email_key = email.casefold()
        # Held across the uniqueness check and the insert; registrations run in the threadpool.
        with self._user_lock:
            if email_key in self.user_ids_by_email:
                raise DuplicateEmailError("Email is already registered")

            now = datetime.now(UTC)
            user = UserRecord(
                id=str(uuid4()),
                name=name,
                email=email,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self.users[user.id] = user
            self.user_ids_by_email[email_key] = user.id
            self.user_write_count += 1
        return user

    def delete_user(self, user_id: str) -> bool:
        """Remove a user together with its tokens."""
        with self._user_lock:
            user = self.users.pop(user_id, None)
            if user is None:
                return False
            self.user_ids_by_email.pop(user.email.casefold(), None)
            for token in self.tokens_for_user(user_id):
                self.tokens.pop(token.id, None)
            self.user_write_count += 1
        return True

    def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def find_user_by_email(self, email: str) -> UserRecord | None:
        user_id = self.user_ids_by_email.get(email.casefold())
        if user_id is None:
            return None
        return self.users.get(user_id)

    def create_token(self, *, user_id: str, name: str, token_hash: str) -> AccessTokenRecord:
        self._maybe_raise_write_failpoint()
        token = AccessTokenRecord(
            id=str(uuid4()),
            user_id=user_id,
            name=name,
            token_hash=token_hash,
            created_at=datetime.now(UTC),
        )
        self.tokens[token.id] = token
        return token

    def get_token(self, token_id: str) -> AccessTokenRecord | None:
        return self.tokens.get(token_id)

    def touch_token(self, token: AccessTokenRecord) -> None:
        token.last_used_at = datetime.now(UTC)

    def delete_token(self, token_id: str) -> bool:
        return self.tokens.pop(token_id, None) is not None

    def tokens_for_user(self, user_id: str) -> list[AccessTokenRecord]:
        return [token for token in self.tokens.values() if token.user_id == user_id]

    def create_task(
        self,
        *,
        user_id: str,
        title: str,
        description: str | None,
        status: TaskStatus,
    ) -> TaskRecord:
        self._maybe_raise_write_failpoint()
        now = datetime.now(UTC)
        task = TaskRecord(
            id=str(uuid4()),
            user_id=user_id,
            title=title,
            description=description,
            status=status,
            created_at=now,
            updated_at=now,
            sequence=next(self._sequence),
        )
        self.tasks[task.id] = task
        self.task_write_count += 1
        return task

    def get_task(self, task_id: str) -> TaskRecord | None:
        return self.tasks.get(task_id)

    def list_tasks_for_owner(
        self,
        user_id: str,
        *,
        status: TaskStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[TaskRecord], int]:
        """Return one newest-first slice of the owner's tasks and the unsliced total."""
        matching = [
            task
            for task in self.tasks.values()
            if task.user_id == user_id and (status is None or task.status == status)
        ]
        matching.sort(key=lambda task: (task.created_at, task.sequence), reverse=True)
        total = len(matching)
        end = None if limit is None else offset + limit
        return matching[offset:end], total

    def update_task(self, task: TaskRecord, changes: dict[str, Any]) -> bool:
        """Apply the given field changes; return whether any stored value changed."""
        unknown = set(changes) - _UPDATABLE_TASK_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {sorted(unknown)}")

        self._maybe_raise_write_failpoint()
        dirty = {name: value for name, value in changes.items() if getattr(task, name) != value}
        if not dirty:
            return False

        for name, value in dirty.items():
            setattr(task, name, value)
        task.updated_at = datetime.now(UTC)
        self.task_write_count += 1
        return True

    def delete_task(self, task_id: str) -> bool:
        self._maybe_raise_write_failpoint()
        removed = self.tasks.pop(task_id, None)
        if removed is None:
            return False
        self.task_write_count += 1
        return True

    def _maybe_raise_write_failpoint(self) -> None:
        if self.fail_next_write is None:
            return

        message = self.fail_next_write
        self.fail_next_write = None
        raise PersistenceError(message)
