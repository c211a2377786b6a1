"""Task API schemas."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, StringConstraints, ValidationInfo, field_validator

TITLE_MAX_LENGTH = 255


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def _trim_or_none(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


TaskTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH)]
TaskDescription = Annotated[str | None, BeforeValidator(_trim_or_none)]


class CreateTaskRequest(BaseModel):
    title: TaskTitle
    description: TaskDescription = None
    status: TaskStatus


class UpdateTaskRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    title: TaskTitle | None = None
    description: TaskDescription = None
    status: TaskStatus | None = None

    @field_validator("title", "status", mode="before")
    @classmethod
    def _reject_explicit_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"The {info.field_name} field is required.")
        return value


class Task(BaseModel):
    id: str
    user_id: str
    title: str
    description: str | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
