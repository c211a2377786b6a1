"""Offset pagination results and their metadata."""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Generic, TypeVar

from starlette.datastructures import URL

from taskboard.schemas.envelope import PaginationLinks, PaginationMeta

ItemT = TypeVar("ItemT")


@dataclass(frozen=True, slots=True)
class Page(Generic[ItemT]):
    items: list[ItemT]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return max(1, ceil(self.total / self.per_page))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def meta(self) -> PaginationMeta:
        first_item = self.offset + 1 if self.items else None
        last_item = self.offset + len(self.items) if self.items else None
        return PaginationMeta(
            current_page=self.page,
            per_page=self.per_page,
            total=self.total,
            last_page=self.last_page,
            from_=first_item,
            to=last_item,
        )

    def links(self, url: URL) -> PaginationLinks:
        """Build page links from the request URL, keeping its other query parameters."""

        def page_url(number: int) -> str:
            return str(url.include_query_params(page=number))

        return PaginationLinks(
            first=page_url(1),
            last=page_url(self.last_page),
            prev=page_url(self.page - 1) if self.page > 1 else None,
            next=page_url(self.page + 1) if self.page < self.last_page else None,
        )
