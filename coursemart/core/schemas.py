from typing import Generic, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class ListState(BaseModel, Generic[T]):
    """List view state: the items, whether a load is running, and the last error."""

    items: list[T] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "ListState[T]":
        """Empty list carrying a user-visible error message."""
        return cls(items=[], loading=False, error=error)
