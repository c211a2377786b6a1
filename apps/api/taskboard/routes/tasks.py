"""Task routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from taskboard.core.config import Settings, get_settings
from taskboard.core.responses import created_response, paginated_response, success_response
from taskboard.repositories.memory import TaskRecord
from taskboard.routes.dependencies import get_authenticated_principal, get_task_service, require_owned_task
from taskboard.schemas.auth import AuthPrincipal
from taskboard.schemas.envelope import Envelope, ErrorEnvelope, MessageEnvelope, PaginatedEnvelope
from taskboard.schemas.task import CreateTaskRequest, Task, TaskStatus, UpdateTaskRequest
from taskboard.services.tasks import TaskService

MAX_PER_PAGE = 100

router = APIRouter(prefix="/tasks", tags=["Tasks"])

_OWNED_TASK_RESPONSES = {
    401: {"model": ErrorEnvelope},
    403: {"model": ErrorEnvelope},
    404: {"model": ErrorEnvelope},
}


@router.get(
    "",
    response_model=PaginatedEnvelope[Task],
    responses={401: {"model": ErrorEnvelope}, 422: {"model": ErrorEnvelope}},
)
async def list_tasks(
    request: Request,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[TaskService, Depends(get_task_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    status_filter: Annotated[TaskStatus | None, Query(alias="status")] = None,
    per_page: Annotated[int | None, Query(ge=1, le=MAX_PER_PAGE)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
) -> JSONResponse:
    result = service.list_tasks(
        owner_id=principal.user_id,
        status=status_filter,
        page=page,
        per_page=per_page or settings.default_per_page,
    )
    return paginated_response(result, url=request.url, message="Tasks retrieved successfully")


@router.post(
    "",
    response_model=Envelope[Task],
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorEnvelope}, 422: {"model": ErrorEnvelope}},
)
async def create_task(
    payload: CreateTaskRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> JSONResponse:
    task = service.create_task(owner_id=principal.user_id, payload=payload)
    return created_response(task, "Task created successfully")


@router.get("/{task_id}", response_model=Envelope[Task], responses=_OWNED_TASK_RESPONSES)
async def show_task(
    task: Annotated[TaskRecord, Depends(require_owned_task("view"))],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> JSONResponse:
    return success_response(service.show_task(task=task), "Task retrieved successfully")


@router.put(
    "/{task_id}",
    response_model=Envelope[Task],
    responses={**_OWNED_TASK_RESPONSES, 422: {"model": ErrorEnvelope}},
)
@router.patch(
    "/{task_id}",
    response_model=Envelope[Task],
    responses={**_OWNED_TASK_RESPONSES, 422: {"model": ErrorEnvelope}},
)
async def update_task(
    task: Annotated[TaskRecord, Depends(require_owned_task("update"))],
    service: Annotated[TaskService, Depends(get_task_service)],
    payload: UpdateTaskRequest | None = None,
) -> JSONResponse:
    updated = service.update_task(task=task, payload=payload or UpdateTaskRequest())
    return success_response(updated, "Task updated successfully")


@router.delete("/{task_id}", response_model=MessageEnvelope, responses=_OWNED_TASK_RESPONSES)
async def delete_task(
    task: Annotated[TaskRecord, Depends(require_owned_task("delete"))],
    service: Annotated[TaskService, Depends(get_task_service)],
) -> JSONResponse:
    service.delete_task(task=task)
    return success_response(message="Task deleted successfully")
