from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Python side stays snake_case; JSON goes out camelCase for the dashboard SPA."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None
    status_code: int = 200


class ErrorEnvelope(CamelModel):
    success: bool = False
    error: str
    status_code: int


class PaginationOut(CamelModel):
    page: int = 1
    limit: int = 50
    total: int = 0
    total_pages: int = 0


class PageOut(CamelModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    pagination: PaginationOut = Field(default_factory=PaginationOut)
