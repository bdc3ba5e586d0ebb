"""Command results and request bodies for writes."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RefetchScope(str, Enum):
    """Views whose data a write makes stale."""

    COURSE_PROGRESS = "course_progress"
    ENROLLMENTS = "enrollments"
    FEEDBACK = "feedback"


class MutationResult(BaseModel):
    """Outcome of a write.

    The caller decides whether to patch local state with ``data`` or re-fetch
    the views listed in ``refetch``.
    """

    ok: bool
    action: str
    data: dict[str, Any] | None = None
    error: str | None = None
    created: bool | None = None
    refetch: list[RefetchScope] = Field(default_factory=list)


class LessonCompletionRequest(BaseModel):
    """Body for marking a lesson complete."""

    course_id: str | None = Field(
        default=None,
        description="When given, the course progress is reconciled and stored right after the write",
    )


class FeedbackRequest(BaseModel):
    """Body for submitting course feedback."""

    course_id: str
    rating: int = Field(..., description="Star rating from 1 to 5")
    comment: str | None = None
