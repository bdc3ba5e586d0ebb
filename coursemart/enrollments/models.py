"""Row models for the enrollment, lesson and progress collections.

Rows come back from PostgREST as JSON objects keyed by column name, with joined
tables nested under the alias used in the select string (see ``queries.py``).
Joins that point at a missing or soft-deleted record come back as ``null``, so
every nested reference is optional.
"""

import math
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RowModel(BaseModel):
    """Base for rows returned by the data service."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProfileRef(RowModel):
    """Joined profile (student or instructor)."""

    id: str | None = None
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


class LessonProgressRow(RowModel):
    """Per-student, per-lesson completion marker."""

    lesson_id: str | None = None
    student_id: str | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    last_accessed_at: datetime | None = None

    @field_validator("is_completed", mode="before")
    @classmethod
    def _null_is_not_completed(cls, value: object) -> object:
        return False if value is None else value


class LessonRow(RowModel):
    """Lesson with its (possibly fanned-out) progress rows."""

    id: str
    course_id: str | None = None
    title: str = ""
    order_index: int | None = None
    is_published: bool | None = None
    lesson_progress: list[LessonProgressRow] = Field(default_factory=list)

    @field_validator("lesson_progress", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return [] if value is None else value


class CourseRef(RowModel):
    """Joined course record."""

    id: str | None = None
    title: str = ""
    description: str | None = None
    level: str | None = None
    thumbnail_url: str | None = None
    lesson_count: int | None = None
    total_duration: int | None = None
    instructor_id: str | None = None
    instructor: ProfileRef | None = None
    lessons: list[LessonRow] = Field(default_factory=list)

    @field_validator("lessons", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("lessons")
    @classmethod
    def _published_only(cls, lessons: list[LessonRow]) -> list[LessonRow]:
        # Lessons selected without the flag were already filtered by the query
        return [lesson for lesson in lessons if lesson.is_published is not False]


class FeedbackRow(RowModel):
    """Course feedback left by a student."""

    id: str | None = None
    course_id: str | None = None
    student_id: str | None = None
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class EnrollmentRow(RowModel):
    """Enrollment with its optional joins."""

    id: str
    student_id: str
    course_id: str
    enrolled_at: datetime | None = None
    updated_at: datetime | None = None
    progress: int = 0
    completed_at: datetime | None = None
    course: CourseRef | None = None
    student: ProfileRef | None = None
    feedback: list[FeedbackRow] = Field(default_factory=list)

    @field_validator("progress", mode="before")
    @classmethod
    def _progress_as_whole_percent(cls, value: object) -> object:
        # Stored progress is numeric and may be fractional; round half up like the views do
        if value is None:
            return 0
        if isinstance(value, float):
            return math.floor(value + 0.5)
        return value

    @field_validator("feedback", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return [] if value is None else value


class CourseOption(RowModel):
    """Course entry for the admin course filter."""

    id: str
    title: str


class CatalogCourse(RowModel):
    """Approved course as listed in the public catalog."""

    id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    instructor_id: str | None = None
    price: float = 0
    level: str | None = None
    category_id: str | None = None
    status: str | None = None
    total_enrollments: int | None = 0
    lesson_count: int | None = 0
    total_duration: int | None = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: dict | None = None
    instructor: ProfileRef | None = None


class Profile(RowModel):
    """Profile row attached to an authenticated user."""

    id: str | None = None
    user_id: str
    email: str | None = None
    full_name: str | None = None
    role: Literal["admin", "instructor", "student"] = "student"
    status: Literal["active", "inactive", "suspended"] = "active"
    avatar_url: str | None = None
