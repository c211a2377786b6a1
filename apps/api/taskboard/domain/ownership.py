"""Ownership checks for per-user resources."""

from taskboard.errors import forbidden
from taskboard.repositories.memory import TaskRecord
from taskboard.schemas.auth import AuthPrincipal


def is_owner(task: TaskRecord, principal: AuthPrincipal) -> bool:
    return task.user_id == principal.user_id


def ensure_owner(task: TaskRecord, principal: AuthPrincipal, *, message: str) -> TaskRecord:
    """Return ``task`` when the principal owns it, otherwise raise a 403 ``ApiError``.

    The error carries only ``message``; nothing from the task is included.
    """
    if not is_owner(task, principal):
        raise forbidden(message)
    return task


__all__ = ["ensure_owner", "is_owner"]
