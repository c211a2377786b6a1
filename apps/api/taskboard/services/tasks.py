"""Task service layer."""

from __future__ import annotations

import logging
from typing import Literal

from taskboard.core.logging_safety import safe_log_identifier
from taskboard.core.pagination import Page
from taskboard.domain.ownership import ensure_owner, is_owner
from taskboard.errors import not_found
from taskboard.repositories.memory import InMemoryStore, TaskRecord
from taskboard.schemas.auth import AuthPrincipal
from taskboard.schemas.task import CreateTaskRequest, Task, TaskStatus, UpdateTaskRequest

TaskAction = Literal["view", "update", "delete"]

TASK_NOT_FOUND = "Task not found"
_FORBIDDEN_MESSAGES: dict[str, str] = {
    "view": "You do not have permission to access this task",
    "update": "You do not have permission to update this task",
    "delete": "You do not have permission to delete this task",
}

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_tasks(
        self,
        *,
        owner_id: str,
        status: TaskStatus | None,
        page: int,
        per_page: int,
    ) -> Page[Task]:
        records, total = self._store.list_tasks_for_owner(
            owner_id,
            status=status,
            offset=(page - 1) * per_page,
            limit=per_page,
        )
        return Page(
            items=[self._to_task(record) for record in records],
            total=total,
            page=page,
            per_page=per_page,
        )

    def create_task(self, *, owner_id: str, payload: CreateTaskRequest) -> Task:
        record = self._store.create_task(
            user_id=owner_id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
        )
        logger.info(
            "tasks.created user_id=%s task_id=%s status=%s",
            safe_log_identifier(owner_id, prefix="uid"),
            record.id,
            record.status.value,
        )
        return self._to_task(record)

    def get_owned_task(self, *, principal: AuthPrincipal, task_id: str, action: TaskAction) -> TaskRecord:
        """Resolve a task for ``principal``: 404 when missing, 403 when owned by someone else."""
        record = self._store.get_task(task_id)
        if record is None:
            raise not_found(TASK_NOT_FOUND)

        if not is_owner(record, principal):
            logger.warning(
                "tasks.forbidden user_id=%s task_id=%s action=%s",
                safe_log_identifier(principal.user_id, prefix="uid"),
                task_id,
                action,
            )
        return ensure_owner(record, principal, message=_FORBIDDEN_MESSAGES[action])

    def show_task(self, *, task: TaskRecord) -> Task:
        return self._to_task(task)

    def update_task(self, *, task: TaskRecord, payload: UpdateTaskRequest) -> Task:
        changes = payload.model_dump(exclude_unset=True)
        if self._store.update_task(task, changes):
            logger.info("tasks.updated task_id=%s fields=%s", task.id, ",".join(sorted(changes)))
        return self._to_task(task)

    def delete_task(self, *, task: TaskRecord) -> None:
        if not self._store.delete_task(task.id):
            raise not_found(TASK_NOT_FOUND)
        logger.info("tasks.deleted task_id=%s", task.id)

    @staticmethod
    def _to_task(record: TaskRecord) -> Task:
        return Task(
            id=record.id,
            user_id=record.user_id,
            title=record.title,
            description=record.description,
            status=record.status,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
