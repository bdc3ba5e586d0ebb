"""Project reconciled enrollments into view shapes.

All projections drop enrollments whose joined course is null; a broken course
reference never reaches a list.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from coursemart.enrollments.models import EnrollmentRow, LessonRow

from .reconciler import (
    ProgressStatus,
    ProgressSummary,
    ReconciledEnrollment,
    classify,
    filter_progress_for_student,
    ordered_lessons,
    reconcile,
)
from .schemas import (
    CourseCard,
    DashboardStats,
    EnrollmentStats,
    FeedbackCandidate,
    FeedbackResponse,
    LessonBadge,
    LessonProgressResponse,
    ProgressSummaryResponse,
    StudentProgressRow,
)


def _recency(value: datetime | None) -> tuple[bool, float]:
    return (value is not None, value.timestamp() if value else 0.0)


def summary_response(summary: ProgressSummary) -> ProgressSummaryResponse:
    return ProgressSummaryResponse(
        completed_count=summary.completed_count,
        total_count=summary.total_count,
        progress_percent=summary.progress_percent,
        last_access_at=summary.last_access_at,
    )


def course_card(item: ReconciledEnrollment) -> CourseCard:
    """Card for one reconciled enrollment."""
    enrollment = item.enrollment
    course = enrollment.course
    return CourseCard(
        enrollment_id=enrollment.id,
        course_id=enrollment.course_id,
        title=course.title,
        description=course.description,
        thumbnail_url=course.thumbnail_url,
        level=course.level,
        instructor_name=course.instructor.full_name if course.instructor else None,
        lesson_count=item.summary.total_count,
        total_duration=course.total_duration or 0,
        completed_lessons=item.summary.completed_count,
        progress_percent=item.summary.progress_percent,
        status=item.status,
        status_label=item.status.label,
        enrolled_at=enrollment.enrolled_at,
        last_access_at=item.summary.last_access_at,
    )


def enrolled_course_cards(reconciled: Iterable[ReconciledEnrollment]) -> list[CourseCard]:
    return [course_card(item) for item in reconciled if item.enrollment.course is not None]


def recent_courses(reconciled: Iterable[ReconciledEnrollment], limit: int = 3) -> list[CourseCard]:
    """In-progress courses, most recently accessed first."""
    in_progress = [
        item
        for item in reconciled
        if item.enrollment.course is not None and item.status == ProgressStatus.IN_PROGRESS
    ]
    in_progress.sort(key=lambda item: _recency(item.summary.last_access_at), reverse=True)
    return [course_card(item) for item in in_progress[:limit]]


def dashboard_stats(reconciled: Sequence[ReconciledEnrollment], certificates: int = 0) -> DashboardStats:
    return DashboardStats(
        total_enrolled=len(reconciled),
        completed_courses=sum(1 for item in reconciled if item.status == ProgressStatus.COMPLETED),
        in_progress_courses=sum(1 for item in reconciled if item.status == ProgressStatus.IN_PROGRESS),
        certificates=certificates,
    )


def feedback_candidates(enrollments: Iterable[EnrollmentRow]) -> list[FeedbackCandidate]:
    """Completed enrollments paired with the first feedback row, if any."""
    candidates = []
    for enrollment in enrollments:
        course = enrollment.course
        if course is None:
            continue
        first = enrollment.feedback[0] if enrollment.feedback else None
        candidates.append(
            FeedbackCandidate(
                enrollment_id=enrollment.id,
                course_id=enrollment.course_id,
                course_title=course.title,
                course_description=course.description,
                instructor_name=course.instructor.full_name if course.instructor else None,
                progress=enrollment.progress,
                completed_at=enrollment.completed_at,
                feedback=FeedbackResponse(
                    id=first.id, rating=first.rating, comment=first.comment, created_at=first.created_at
                )
                if first
                else None,
            )
        )
    return candidates


def student_progress_row(enrollment: EnrollmentRow) -> StudentProgressRow:
    student = enrollment.student
    return StudentProgressRow(
        enrollment_id=enrollment.id,
        student_id=enrollment.student_id,
        student_name=(student.full_name if student else None) or "Student",
        student_email=(student.email if student else None) or "",
        course_id=enrollment.course_id,
        course_title=enrollment.course.title or "Course",
        enrolled_at=enrollment.enrolled_at,
        progress=enrollment.progress,
        completed_at=enrollment.completed_at,
        status=classify(enrollment.progress, enrollment.completed_at),
    )


def student_progress_table(enrollments: Iterable[EnrollmentRow]) -> list[StudentProgressRow]:
    """Admin table rows using the server-stored progress value."""
    return [student_progress_row(enrollment) for enrollment in enrollments if enrollment.course is not None]


def lesson_badges(lessons: Iterable[LessonRow], student_id: str) -> list[LessonBadge]:
    """One badge per lesson, in display order, for ``student_id`` only."""
    badges = []
    for lesson in ordered_lessons(lessons):
        rows = filter_progress_for_student(lesson.lesson_progress, student_id)
        completed_rows = [row for row in rows if row.is_completed]
        accessed = [row.last_accessed_at for row in rows if row.last_accessed_at]
        badges.append(
            LessonBadge(
                lesson_id=lesson.id,
                title=lesson.title,
                order_index=lesson.order_index,
                is_completed=bool(completed_rows),
                completed_at=completed_rows[0].completed_at if completed_rows else None,
                last_accessed_at=max(accessed) if accessed else None,
            )
        )
    return badges


def lesson_progress_view(enrollment: EnrollmentRow, lessons: Sequence[LessonRow]) -> LessonProgressResponse:
    """Per-lesson badges plus the reconciled summary for one enrollment."""
    summary = reconcile(enrollment, lessons=lessons)
    student = enrollment.student
    return LessonProgressResponse(
        course_id=enrollment.course_id,
        course_title=enrollment.course.title if enrollment.course else None,
        student_id=enrollment.student_id,
        student_name=student.full_name if student else None,
        student_email=student.email if student else None,
        stored_progress=enrollment.progress,
        lessons=lesson_badges(lessons, enrollment.student_id),
        summary=summary_response(summary),
        status=classify(summary.progress_percent, enrollment.completed_at),
    )


def enrollment_stats(enrollments: Sequence[EnrollmentRow]) -> EnrollmentStats:
    total = len(enrollments)
    return EnrollmentStats(
        total_enrollments=total,
        active_students=len({enrollment.student_id for enrollment in enrollments}),
        completed_courses=sum(1 for enrollment in enrollments if enrollment.completed_at),
        average_progress=sum(enrollment.progress for enrollment in enrollments) / total if total else 0.0,
    )
