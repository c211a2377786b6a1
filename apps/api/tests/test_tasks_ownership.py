"""Ownership enforcement tests for task routes and services."""

from __future__ import annotations

import os
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from taskboard.core.config import get_settings
from taskboard.core.responses import forbidden_response
from taskboard.domain.ownership import ensure_owner, is_owner
from taskboard.errors import ApiError
from taskboard.main import create_app
from taskboard.repositories.memory import InMemoryStore
from taskboard.schemas.auth import AuthPrincipal
from taskboard.schemas.task import CreateTaskRequest, TaskStatus, UpdateTaskRequest
from taskboard.services.tasks import TaskService


class _SettingsEnvCase(unittest.TestCase):
    _env = {
        "TASKBOARD_DEBUG": "false",
        "TASKBOARD_PASSWORD_HASH_TIME_COST": "1",
        "TASKBOARD_PASSWORD_HASH_MEMORY_COST": "1024",
        "TASKBOARD_PASSWORD_HASH_PARALLELISM": "1",
    }

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env}
        os.environ.update(self._env)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


def _headers_for(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(
        "/api/register",
        json={
            "name": email.split("@")[0],
            "email": email,
            "password": "password123",
            "password_confirmation": "password123",
        },
    )
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


class TaskOwnershipApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.owner_headers = _headers_for(self.client, "owner@example.com")
        self.other_headers = _headers_for(self.client, "other@example.com")
        created = self.client.post(
            "/api/tasks",
            headers=self.owner_headers,
            json={"title": "Secret plans", "description": "do not leak", "status": "pending"},
        )
        self.task_id = created.json()["data"]["id"]

    def _assert_forbidden_without_leak(self, response, message: str) -> None:
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"success": False, "message": message})
        self.assertNotIn("Secret plans", response.text)
        self.assertNotIn("do not leak", response.text)

    def test_show_foreign_task_is_forbidden(self) -> None:
        response = self.client.get(f"/api/tasks/{self.task_id}", headers=self.other_headers)

        self._assert_forbidden_without_leak(response, "You do not have permission to access this task")

    def test_update_foreign_task_is_forbidden_and_unchanged(self) -> None:
        for method in ("PUT", "PATCH"):
            with self.subTest(method=method):
                response = self.client.request(
                    method,
                    f"/api/tasks/{self.task_id}",
                    headers=self.other_headers,
                    json={"title": "Hijacked", "status": "completed"},
                )
                self._assert_forbidden_without_leak(response, "You do not have permission to update this task")

        stored = self.app.state.store.get_task(self.task_id)
        self.assertEqual(stored.title, "Secret plans")
        self.assertEqual(stored.status, TaskStatus.PENDING)

    def test_ownership_is_checked_before_payload_validation(self) -> None:
        response = self.client.patch(
            f"/api/tasks/{self.task_id}",
            headers=self.other_headers,
            json={"title": ""},
        )

        self._assert_forbidden_without_leak(response, "You do not have permission to update this task")

    def test_delete_foreign_task_is_forbidden_and_task_survives(self) -> None:
        response = self.client.delete(f"/api/tasks/{self.task_id}", headers=self.other_headers)

        self._assert_forbidden_without_leak(response, "You do not have permission to delete this task")
        self.assertIsNotNone(self.app.state.store.get_task(self.task_id))

    def test_forbidden_envelope_is_built_by_the_forbidden_helper(self) -> None:
        with patch("taskboard.main.forbidden_response", wraps=forbidden_response) as helper:
            response = self.client.get(f"/api/tasks/{self.task_id}", headers=self.other_headers)

        self.assertEqual(response.status_code, 403)
        helper.assert_called_once_with("You do not have permission to access this task", error=None)

    def test_list_excludes_foreign_tasks(self) -> None:
        self.client.post("/api/tasks", headers=self.other_headers, json={"title": "Mine", "status": "pending"})

        other_list = self.client.get("/api/tasks", headers=self.other_headers).json()
        owner_list = self.client.get("/api/tasks", headers=self.owner_headers).json()

        self.assertEqual([task["title"] for task in other_list["data"]], ["Mine"])
        self.assertEqual(other_list["meta"]["total"], 1)
        self.assertEqual([task["id"] for task in owner_list["data"]], [self.task_id])

    def test_owner_can_still_access_after_foreign_attempts(self) -> None:
        self.client.delete(f"/api/tasks/{self.task_id}", headers=self.other_headers)

        response = self.client.get(f"/api/tasks/{self.task_id}", headers=self.owner_headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["title"], "Secret plans")


class TaskOwnershipUnitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.service = TaskService(self.store)
        self.alice = AuthPrincipal(user_id="user-a", token_id="token-a")
        self.bob = AuthPrincipal(user_id="user-b", token_id="token-b")

    def test_service_scopes_tasks_to_owner(self) -> None:
        task_a = self.service.create_task(
            owner_id="user-a",
            payload=CreateTaskRequest(title="A", status=TaskStatus.PENDING),
        )
        self.service.create_task(owner_id="user-b", payload=CreateTaskRequest(title="B", status=TaskStatus.PENDING))

        page = self.service.list_tasks(owner_id="user-a", status=None, page=1, per_page=15)
        self.assertEqual([task.id for task in page.items], [task_a.id])
        self.assertEqual(page.total, 1)

        record = self.service.get_owned_task(principal=self.alice, task_id=task_a.id, action="view")
        self.assertEqual(record.id, task_a.id)

        with self.assertRaises(ApiError) as context:
            self.service.get_owned_task(principal=self.bob, task_id=task_a.id, action="delete")
        self.assertEqual(context.exception.status_code, 403)
        self.assertEqual(context.exception.message, "You do not have permission to delete this task")
        self.assertIsNone(context.exception.errors)

    def test_missing_task_is_not_found_before_ownership(self) -> None:
        with self.assertRaises(ApiError) as context:
            self.service.get_owned_task(principal=self.bob, task_id="missing", action="view")

        self.assertEqual(context.exception.status_code, 404)

    def test_partial_update_through_service(self) -> None:
        created = self.service.create_task(
            owner_id="user-a",
            payload=CreateTaskRequest(title="Draft", description="body", status=TaskStatus.PENDING),
        )
        record = self.service.get_owned_task(principal=self.alice, task_id=created.id, action="update")

        updated = self.service.update_task(
            task=record,
            payload=UpdateTaskRequest.model_validate({"status": "completed"}),
        )

        self.assertEqual(updated.status, TaskStatus.COMPLETED)
        self.assertEqual(updated.title, "Draft")
        self.assertEqual(updated.description, "body")
        self.assertEqual(updated.user_id, "user-a")

    def test_ensure_owner_guard(self) -> None:
        record = self.store.create_task(user_id="user-a", title="T", description=None, status=TaskStatus.PENDING)

        self.assertTrue(is_owner(record, self.alice))
        self.assertFalse(is_owner(record, self.bob))
        self.assertIs(ensure_owner(record, self.alice, message="nope"), record)
        with self.assertRaises(ApiError) as context:
            ensure_owner(record, self.bob, message="nope")
        self.assertEqual(context.exception.status_code, 403)
        self.assertEqual(context.exception.message, "nope")


if __name__ == "__main__":
    unittest.main()
