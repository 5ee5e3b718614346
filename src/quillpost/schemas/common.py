"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every response body."""

    success: bool = Field(True, description="False when the request failed.")
    message: str
    data: T | None = None


class Pagination(BaseModel):
    """Position of a page within a listing."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> Pagination:
        """Return pagination metadata with ``pages`` derived from the total."""
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class Page(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T]
    pagination: Pagination
