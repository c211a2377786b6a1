"""Response envelope schemas used for OpenAPI documentation."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: DataT | None = None


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str


class DebugDetails(BaseModel):
    exception: str
    file: str | None = None
    line: int | None = None
    trace: list[dict[str, Any]]


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    errors: dict[str, list[str]] | None = None
    error: str | None = None
    debug: DebugDetails | None = None


class PaginationMeta(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None

    model_config = ConfigDict(populate_by_name=True)


class PaginationLinks(BaseModel):
    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class PaginatedEnvelope(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: list[DataT]
    meta: PaginationMeta
    links: PaginationLinks
