from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """A page of results as returned to the API layer."""

    data: List[T] = field(default_factory=list)
    current_page: int = 0
    per_page: int = 0
