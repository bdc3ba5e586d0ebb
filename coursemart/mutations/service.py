"""Writes against the data service.

Every write returns a ``MutationResult`` instead of raising on service
failures. Nothing is retried; a failed write is reported and the user
resubmits. Invalid input still raises ``ValidationError``.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from supabase import AsyncClient, PostgrestAPIError

from coursemart.auth.exceptions import AuthorizationError
from coursemart.auth.session import SessionContext
from coursemart.enrollments.models import EnrollmentRow
from coursemart.enrollments.queries import ENROLLMENTS_TABLE, FEEDBACK_TABLE, LESSON_PROGRESS_TABLE
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.exceptions import DataFetchError, ValidationError
from coursemart.progress.reconciler import ProgressSummary

from .schemas import MutationResult, RefetchScope


logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _now() -> str:
    return datetime.now(UTC).isoformat()


class MutationGateway:
    """Applies lesson-progress, enrollment and feedback writes."""

    def __init__(self, client: AsyncClient, repository: EnrollmentRepository | None = None) -> None:
        self.client = client
        self.repository = repository or EnrollmentRepository(client)

    async def _write(self, action: str, query: Any, refetch: list[RefetchScope]) -> MutationResult:
        try:
            response = await query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.exception(f"Write failed: {action}")
            return MutationResult(
                ok=False,
                action=action,
                error=getattr(e, "message", None) or str(e) or "Write failed",
            )

        rows = (response.data if response else None) or []
        if isinstance(rows, dict):
            rows = [rows]
        data = rows[0] if rows else None
        return MutationResult(ok=True, action=action, data=data, created=True, refetch=refetch)

    async def mark_lesson_complete(self, student_id: str, lesson_id: str) -> MutationResult:
        """Mark a lesson completed for the student (one row per lesson and student)."""
        now = _now()
        payload = {
            "student_id": student_id,
            "lesson_id": lesson_id,
            "is_completed": True,
            "completed_at": now,
            "last_accessed_at": now,
        }
        query = self.client.table(LESSON_PROGRESS_TABLE).upsert(payload, on_conflict="lesson_id,student_id")
        result = await self._write(
            "mark_lesson_complete",
            query,
            [RefetchScope.COURSE_PROGRESS, RefetchScope.ENROLLMENTS],
        )
        if result.ok:
            logger.info(f"Lesson {lesson_id} completed by student {student_id}")
        return result

    async def record_lesson_access(self, student_id: str, lesson_id: str) -> MutationResult:
        """Stamp the last access time, creating the progress row on first access."""
        payload = {
            "student_id": student_id,
            "lesson_id": lesson_id,
            "last_accessed_at": _now(),
        }
        query = self.client.table(LESSON_PROGRESS_TABLE).upsert(payload, on_conflict="lesson_id,student_id")
        return await self._write("record_lesson_access", query, [RefetchScope.COURSE_PROGRESS])

    async def sync_enrollment_progress(self, enrollment: EnrollmentRow, summary: ProgressSummary) -> MutationResult:
        """Store the reconciled percentage on the enrollment.

        Reaching 100% stamps ``completed_at`` once; an existing stamp is kept.
        """
        now = _now()
        payload: dict[str, Any] = {"progress": summary.progress_percent, "updated_at": now}
        if summary.progress_percent >= 100 and enrollment.completed_at is None:
            payload["completed_at"] = now

        query = self.client.table(ENROLLMENTS_TABLE).update(payload).eq("id", enrollment.id)
        result = await self._write("sync_enrollment_progress", query, [RefetchScope.ENROLLMENTS])
        result.created = False
        return result

    async def submit_feedback(
        self,
        student_id: str,
        course_id: str,
        rating: int | None,
        comment: str | None = None,
    ) -> MutationResult:
        """Create or update the student's feedback for a course."""
        if not rating:
            msg = "Please provide a rating"
            raise ValidationError(msg)
        if not MIN_RATING <= rating <= MAX_RATING:
            msg = f"Rating must be between {MIN_RATING} and {MAX_RATING}"
            raise ValidationError(msg)

        feedback_data = {
            "course_id": course_id,
            "student_id": student_id,
            "rating": rating,
            "comment": (comment or "").strip() or None,
        }

        try:
            existing = await self.repository.find_feedback(student_id, course_id)
        except DataFetchError as e:
            return MutationResult(ok=False, action="submit_feedback", error=str(e))

        if existing:
            query = self.client.table(FEEDBACK_TABLE).update(feedback_data).eq("id", existing.id)
            result = await self._write("update_feedback", query, [RefetchScope.FEEDBACK])
            result.created = False
            return result

        query = self.client.table(FEEDBACK_TABLE).insert(feedback_data)
        return await self._write("submit_feedback", query, [RefetchScope.FEEDBACK])

    async def enroll(self, session: SessionContext, course_id: str) -> MutationResult:
        """Enroll the calling student in a course.

        Only students can enroll. An existing enrollment is returned as-is.
        """
        user = session.require_user()
        if session.role != "student":
            msg = "Only students can enroll in courses"
            raise AuthorizationError(msg)

        try:
            existing = await self.repository.find_enrollment(user.id, course_id)
        except DataFetchError as e:
            return MutationResult(ok=False, action="enroll", error=str(e))

        if existing:
            logger.info(f"Student {user.id} is already enrolled in course {course_id}")
            return MutationResult(
                ok=True,
                action="enroll",
                data=existing.model_dump(mode="json", exclude={"course", "student", "feedback"}),
                created=False,
            )

        query = self.client.table(ENROLLMENTS_TABLE).insert({"course_id": course_id, "student_id": user.id})
        result = await self._write("enroll", query, [RefetchScope.ENROLLMENTS])
        if result.ok:
            logger.info(f"Student {user.id} enrolled in course {course_id}")
        return result
