"""Read access to enrollments, lessons, lesson progress and courses."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient, PostgrestAPIError

from coursemart.exceptions import DataFetchError

from .models import CatalogCourse, CourseOption, EnrollmentRow, FeedbackRow, LessonRow
from .queries import (
    ADMIN_ENROLLMENTS_SELECT,
    CATALOG_SELECT,
    CERTIFICATES_TABLE,
    COMPLETED_ENROLLMENTS_SELECT,
    COURSE_OPTIONS_SELECT,
    COURSES_TABLE,
    ENROLLMENT_DETAILS_SELECT,
    ENROLLMENTS_TABLE,
    FEEDBACK_TABLE,
    LESSONS_TABLE,
    LESSONS_WITH_PROGRESS_SELECT,
    STUDENT_ENROLLMENTS_SELECT,
)


logger = logging.getLogger(__name__)


class EnrollmentRepository:
    """Row fetcher for the enrollment read shapes.

    Every method issues one filtered/sorted query and validates the rows into
    models. Service failures are logged and raised as ``DataFetchError``.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def _execute(self, resource: str, query: Any) -> Any:
        try:
            return await query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.exception(f"Query for {resource} failed")
            detail = getattr(e, "message", None) or str(e) or None
            raise DataFetchError(resource, detail) from e

    async def _fetch_rows(self, resource: str, query: Any) -> list[dict[str, Any]]:
        response = await self._execute(resource, query)
        return list(response.data or [])

    async def _fetch_one(self, resource: str, query: Any) -> dict[str, Any] | None:
        # maybe_single() yields no response object at all when nothing matched
        response = await self._execute(resource, query)
        if response is None:
            return None
        return response.data or None

    @staticmethod
    def _validate_many(resource: str, model: type, rows: list[dict[str, Any]]) -> list:
        try:
            return [model.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            logger.exception(f"Malformed {resource} row")
            raise DataFetchError(resource, "malformed row") from e

    async def list_student_enrollments(self, student_id: str) -> list[EnrollmentRow]:
        """Enrollments of one student with course, instructor and lesson progress."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select(STUDENT_ENROLLMENTS_SELECT)
            .eq("student_id", student_id)
            .eq("course.lessons.is_published", True)
            .order("enrolled_at", desc=True)
        )
        rows = await self._fetch_rows("enrollments", query)
        return self._validate_many("enrollments", EnrollmentRow, rows)

    async def list_completed_enrollments(self, student_id: str) -> list[EnrollmentRow]:
        """Enrollments whose stored progress reached 100, with feedback rows."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select(COMPLETED_ENROLLMENTS_SELECT)
            .eq("student_id", student_id)
            .gte("progress", 100)
            .order("completed_at", desc=True)
        )
        rows = await self._fetch_rows("completed courses", query)
        return self._validate_many("completed courses", EnrollmentRow, rows)

    async def list_all_enrollments(self) -> list[EnrollmentRow]:
        """All enrollments with student profile and course title (admin view)."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select(ADMIN_ENROLLMENTS_SELECT)
            .order("enrolled_at", desc=True)
        )
        rows = await self._fetch_rows("enrollments", query)
        return self._validate_many("enrollments", EnrollmentRow, rows)

    async def list_enrollment_details(self) -> list[EnrollmentRow]:
        """All enrollments with the fields used by the details export."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select(ENROLLMENT_DETAILS_SELECT)
            .order("enrolled_at", desc=True)
        )
        rows = await self._fetch_rows("enrollment details", query)
        return self._validate_many("enrollment details", EnrollmentRow, rows)

    async def list_lessons_with_progress(
        self,
        course_id: str,
        student_id: str | None = None,
        *,
        published_only: bool = False,
    ) -> list[LessonRow]:
        """Lessons of a course in display order with their progress rows.

        The student filter narrows the embedded progress rows server-side; the
        reconciler still filters them again because joins may fan out.
        """
        query = self.client.table(LESSONS_TABLE).select(LESSONS_WITH_PROGRESS_SELECT).eq("course_id", course_id)
        if published_only:
            query = query.eq("is_published", True)
        if student_id:
            query = query.eq("lesson_progress.student_id", student_id)
        query = query.order("order_index")

        rows = await self._fetch_rows("lesson progress", query)
        return self._validate_many("lesson progress", LessonRow, rows)

    async def list_course_options(self) -> list[CourseOption]:
        """Non-deleted courses for the admin course filter."""
        query = (
            self.client.table(COURSES_TABLE)
            .select(COURSE_OPTIONS_SELECT)
            .eq("soft_deleted", False)
            .order("title")
        )
        rows = await self._fetch_rows("courses", query)
        return self._validate_many("courses", CourseOption, rows)

    async def list_catalog(
        self,
        category_id: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[CatalogCourse]:
        """Approved, non-deleted courses, newest first."""
        query = (
            self.client.table(COURSES_TABLE)
            .select(CATALOG_SELECT)
            .eq("status", "approved")
            .eq("soft_deleted", False)
            .order("created_at", desc=True)
        )
        if category_id:
            query = query.eq("category_id", category_id)
        if search:
            query = query.or_(f"title.ilike.%{search}%,description.ilike.%{search}%")
        if limit:
            query = query.limit(limit)

        rows = await self._fetch_rows("courses", query)
        return self._validate_many("courses", CatalogCourse, rows)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentRow | None:
        """Single enrollment with student profile and course title."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select(ADMIN_ENROLLMENTS_SELECT)
            .eq("id", enrollment_id)
            .maybe_single()
        )
        row = await self._fetch_one("enrollment", query)
        return EnrollmentRow.model_validate(row) if row else None

    async def find_enrollment(self, student_id: str, course_id: str) -> EnrollmentRow | None:
        """Enrollment for the (student, course) pair, if any."""
        query = (
            self.client.table(ENROLLMENTS_TABLE)
            .select("*")
            .eq("course_id", course_id)
            .eq("student_id", student_id)
            .maybe_single()
        )
        row = await self._fetch_one("enrollment", query)
        return EnrollmentRow.model_validate(row) if row else None

    async def find_feedback(self, student_id: str, course_id: str) -> FeedbackRow | None:
        """Feedback the student already left for the course, if any."""
        query = (
            self.client.table(FEEDBACK_TABLE)
            .select("*")
            .eq("course_id", course_id)
            .eq("student_id", student_id)
            .maybe_single()
        )
        row = await self._fetch_one("feedback", query)
        return FeedbackRow.model_validate(row) if row else None

    async def count_certificates(self, student_id: str) -> int:
        """Number of certificates issued to the student."""
        query = self.client.table(CERTIFICATES_TABLE).select("id", count="exact").eq("student_id", student_id)
        response = await self._execute("certificates", query)
        if response.count is not None:
            return response.count
        return len(response.data or [])
