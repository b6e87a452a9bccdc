"""Shared schema building blocks: camelCase models and response envelopes."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base model emitting camelCase JSON while accepting snake_case input too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[DataT]):
    """Uniform success wrapper used by every JSON endpoint."""

    success: bool = True
    data: DataT
    message: str | None = None


class MessageResponse(CamelModel):
    """Success envelope carrying only a message."""

    success: bool = True
    message: str


class Pagination(CamelModel):
    """Page metadata attached to list responses."""

    current: int = Field(ge=1, description="Current page number")
    total: int = Field(ge=0, description="Total number of pages")
    count: int = Field(ge=0, description="Items on the current page")
    total_count: int = Field(ge=0, description="Items matching the query across all pages")


__all__ = ["CamelModel", "DataT", "Envelope", "MessageResponse", "Pagination"]
