"""
Base DTOs for the application layer.
Provides common configuration for request/response data transfer objects.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        extra="forbid",
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )


T = TypeVar("T")


class PageResponseDTO(ResponseDTO, Generic[T]):
    """A page of results."""

    data: List[T] = Field(default_factory=list)
    current_page: int = Field(default=0, alias="currentPage")
    per_page: int = Field(default=0, alias="perPage")
