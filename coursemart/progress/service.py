"""Student and admin progress views."""

import logging

from coursemart.auth.session import SessionContext
from coursemart.core.schemas import ListState
from coursemart.enrollments.models import CourseOption, EnrollmentRow
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.exceptions import DataFetchError, ResourceNotFoundError
from coursemart.mutations.schemas import MutationResult
from coursemart.mutations.service import MutationGateway

from .export import export_enrollments_csv
from .filters import ALL, filter_enrollments, parse_band
from .projector import (
    dashboard_stats,
    enrolled_course_cards,
    enrollment_stats,
    feedback_candidates,
    lesson_progress_view,
    recent_courses,
    student_progress_table,
)
from .reconciler import reconcile, reconcile_enrollments
from .schemas import (
    CourseCard,
    DashboardStats,
    EnrollmentDetailsResponse,
    EnrollmentStats,
    FeedbackCandidate,
    LessonCompletionResponse,
    LessonProgressResponse,
    StudentDashboardResponse,
    StudentProgressRow,
)


logger = logging.getLogger(__name__)

FETCH_ENROLLMENTS_FAILED = "Failed to load your courses"
FETCH_FEEDBACK_FAILED = "Failed to load completed courses"
FETCH_PROGRESS_FAILED = "Failed to load student progress"
FETCH_COURSE_OPTIONS_FAILED = "Failed to load courses"
FETCH_DETAILS_FAILED = "Failed to fetch enrollment details"


def _with_course(enrollments: list[EnrollmentRow]) -> list[EnrollmentRow]:
    return [enrollment for enrollment in enrollments if enrollment.course is not None]


class StudentProgressService:
    """Views and writes for the signed-in student."""

    def __init__(
        self,
        repository: EnrollmentRepository,
        gateway: MutationGateway,
        recent_limit: int = 3,
    ) -> None:
        self.repository = repository
        self.gateway = gateway
        self.recent_limit = recent_limit

    async def dashboard(self, session: SessionContext) -> StudentDashboardResponse:
        """Stats and the in-progress courses to continue."""
        user = session.require_user()
        try:
            enrollments = await self.repository.list_student_enrollments(user.id)
            certificates = await self.repository.count_certificates(user.id)
        except DataFetchError as e:
            logger.warning(f"Dashboard fetch failed for student {user.id}: {e}")
            return StudentDashboardResponse(
                stats=DashboardStats(total_enrolled=0, completed_courses=0, in_progress_courses=0, certificates=0),
                recent_courses=[],
                error=FETCH_ENROLLMENTS_FAILED,
            )

        reconciled = reconcile_enrollments(enrollments, student_id=user.id)
        return StudentDashboardResponse(
            stats=dashboard_stats(reconciled, certificates=certificates),
            recent_courses=recent_courses(reconciled, limit=self.recent_limit),
        )

    async def enrolled_courses(self, session: SessionContext) -> ListState[CourseCard]:
        user = session.require_user()
        try:
            enrollments = await self.repository.list_student_enrollments(user.id)
        except DataFetchError as e:
            logger.warning(f"Course list fetch failed for student {user.id}: {e}")
            return ListState[CourseCard].failed(FETCH_ENROLLMENTS_FAILED)

        reconciled = reconcile_enrollments(enrollments, student_id=user.id)
        return ListState[CourseCard](items=enrolled_course_cards(reconciled))

    async def feedback_candidates(self, session: SessionContext) -> ListState[FeedbackCandidate]:
        """Completed courses with the feedback already given, if any."""
        user = session.require_user()
        try:
            enrollments = await self.repository.list_completed_enrollments(user.id)
        except DataFetchError as e:
            logger.warning(f"Completed course fetch failed for student {user.id}: {e}")
            return ListState[FeedbackCandidate].failed(FETCH_FEEDBACK_FAILED)

        return ListState[FeedbackCandidate](items=feedback_candidates(enrollments))

    async def course_progress(self, session: SessionContext, course_id: str) -> LessonProgressResponse:
        """Published lessons of an enrolled course with the student's badges.

        Raises:
            ResourceNotFoundError: The student is not enrolled in the course.
            DataFetchError: Lessons or the enrollment could not be read.
        """
        user = session.require_user()
        enrollment = await self.repository.find_enrollment(user.id, course_id)
        if enrollment is None:
            raise ResourceNotFoundError("Enrollment", course_id)

        lessons = await self.repository.list_lessons_with_progress(course_id, user.id, published_only=True)
        return lesson_progress_view(enrollment, lessons)

    async def complete_lesson(
        self,
        session: SessionContext,
        lesson_id: str,
        course_id: str | None = None,
    ) -> LessonCompletionResponse:
        """Mark a lesson complete and, for a known course, store the new percentage."""
        user = session.require_user()
        result = await self.gateway.mark_lesson_complete(user.id, lesson_id)
        if not result.ok or not course_id:
            return LessonCompletionResponse(result=result)

        try:
            enrollment = await self.repository.find_enrollment(user.id, course_id)
            if enrollment is None:
                logger.info(f"Lesson {lesson_id} completed outside an enrollment for course {course_id}")
                return LessonCompletionResponse(result=result)
            lessons = await self.repository.list_lessons_with_progress(course_id, user.id, published_only=True)
        except DataFetchError as e:
            # The lesson write itself succeeded; the stored percentage catches up on the next completion
            logger.warning(f"Could not re-read progress for course {course_id}: {e}")
            return LessonCompletionResponse(result=result)

        summary = reconcile(enrollment, lessons=lessons)
        synced = await self.gateway.sync_enrollment_progress(enrollment, summary)
        if not synced.ok:
            logger.warning(f"Progress sync failed for enrollment {enrollment.id}: {synced.error}")

        return LessonCompletionResponse(result=result, progress=lesson_progress_view(enrollment, lessons))

    async def record_access(self, session: SessionContext, lesson_id: str) -> MutationResult:
        user = session.require_user()
        return await self.gateway.record_lesson_access(user.id, lesson_id)

    async def submit_feedback(
        self,
        session: SessionContext,
        course_id: str,
        rating: int | None,
        comment: str | None = None,
    ) -> MutationResult:
        user = session.require_user()
        return await self.gateway.submit_feedback(user.id, course_id, rating, comment)


class AdminProgressService:
    """Read-only progress views across all students."""

    def __init__(self, repository: EnrollmentRepository) -> None:
        self.repository = repository

    async def progress_table(self, course_id: str | None = ALL, band: str | None = ALL) -> ListState[StudentProgressRow]:
        """Filtered student progress table.

        Raises:
            ValidationError: ``band`` is not a known progress band.
        """
        parse_band(band)
        try:
            enrollments = await self.repository.list_all_enrollments()
        except DataFetchError as e:
            logger.warning(f"Progress table fetch failed: {e}")
            return ListState[StudentProgressRow].failed(FETCH_PROGRESS_FAILED)

        filtered = filter_enrollments(_with_course(enrollments), course_id=course_id, band=band)
        return ListState[StudentProgressRow](items=student_progress_table(filtered))

    async def lesson_details(self, enrollment_id: str) -> LessonProgressResponse:
        """Per-lesson badges for the student of one enrollment."""
        enrollment = await self.repository.get_enrollment(enrollment_id)
        if enrollment is None:
            raise ResourceNotFoundError("Enrollment", enrollment_id)

        lessons = await self.repository.list_lessons_with_progress(enrollment.course_id)
        return lesson_progress_view(enrollment, lessons)

    async def course_options(self) -> ListState[CourseOption]:
        try:
            options = await self.repository.list_course_options()
        except DataFetchError as e:
            logger.warning(f"Course options fetch failed: {e}")
            return ListState[CourseOption].failed(FETCH_COURSE_OPTIONS_FAILED)
        return ListState[CourseOption](items=options)

    async def enrollment_details(self) -> EnrollmentDetailsResponse:
        """All enrollments with aggregate stats."""
        try:
            enrollments = _with_course(await self.repository.list_enrollment_details())
        except DataFetchError as e:
            logger.warning(f"Enrollment details fetch failed: {e}")
            return EnrollmentDetailsResponse(
                enrollments=[],
                stats=EnrollmentStats(total_enrollments=0, active_students=0, completed_courses=0, average_progress=0.0),
                error=FETCH_DETAILS_FAILED,
            )

        return EnrollmentDetailsResponse(
            enrollments=student_progress_table(enrollments),
            stats=enrollment_stats(enrollments),
        )

    async def export_csv(self, course_id: str | None = ALL, band: str | None = ALL) -> str:
        """CSV of the filtered enrollment details.

        Raises:
            ValidationError: ``band`` is not a known progress band.
            DataFetchError: The enrollments could not be read.
        """
        parse_band(band)
        enrollments = _with_course(await self.repository.list_enrollment_details())
        filtered = filter_enrollments(enrollments, course_id=course_id, band=band)
        logger.info(f"Exporting {len(filtered)} enrollments")
        return export_enrollments_csv(filtered)
