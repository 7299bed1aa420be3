"""Schemas shared by several routers."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Offset-paginated list.

    Usage:
        response_model=PaginatedResponse[ApplicationSummary]
    """
    items: list[T]
    total: int
    limit: int
    offset: int
