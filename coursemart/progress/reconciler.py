"""Reconcile lesson completion rows into per-enrollment progress.

Single source of truth for completion math. Views never derive progress from
raw lesson-progress rows themselves; they go through ``reconcile``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from coursemart.enrollments.models import EnrollmentRow, LessonProgressRow, LessonRow


logger = logging.getLogger(__name__)


class ProgressStatus(str, Enum):
    """Display classification of an enrollment."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        """Human readable label."""
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class ProgressSummary:
    """Derived progress of one student in one course."""

    completed_count: int
    total_count: int
    progress_percent: int
    last_access_at: datetime | None = None


@dataclass(frozen=True)
class ReconciledEnrollment:
    """Enrollment paired with its derived progress and classification."""

    enrollment: EnrollmentRow
    summary: ProgressSummary
    status: ProgressStatus


def ordered_lessons(lessons: Iterable[LessonRow]) -> list[LessonRow]:
    """Sort lessons by ``order_index`` ascending; unnumbered lessons go last."""
    return sorted(lessons, key=lambda lesson: (lesson.order_index is None, lesson.order_index or 0))


def filter_progress_for_student(rows: Iterable[LessonProgressRow], student_id: str) -> list[LessonProgressRow]:
    """Keep only progress rows that belong to ``student_id``."""
    return [row for row in rows if row.student_id == student_id]


def is_lesson_completed(lesson: LessonRow, student_id: str) -> bool:
    """A lesson is completed once the student has any completed progress row for it."""
    return any(row.is_completed for row in filter_progress_for_student(lesson.lesson_progress, student_id))


def completion_percent(completed: int, total: int) -> int:
    """Percentage of completed lessons, rounded half up; 0 when there are no lessons."""
    denominator = max(total, 1)
    # Integer form of floor(100 * completed / denominator + 0.5)
    return (200 * completed + denominator) // (2 * denominator)


def classify(progress_percent: int, completed_at: datetime | None = None) -> ProgressStatus:
    """Classify progress for display.

    An explicit completion stamp wins over a recomputed percentage that lags.
    """
    if completed_at is not None or progress_percent >= 100:
        return ProgressStatus.COMPLETED
    if progress_percent <= 0:
        return ProgressStatus.NOT_STARTED
    return ProgressStatus.IN_PROGRESS


def reconcile(
    enrollment: EnrollmentRow,
    lessons: Sequence[LessonRow] | None = None,
    student_id: str | None = None,
) -> ProgressSummary:
    """Compute completion counts, percentage and last access for an enrollment.

    Args:
        enrollment: The enrollment being reconciled.
        lessons: Lessons of the course. Defaults to the lessons nested in the
            enrollment's joined course.
        student_id: Student whose progress counts. Defaults to the enrollment's
            own student.

    Returns
    -------
        ProgressSummary for the student in the enrollment's course.
    """
    student_id = student_id or enrollment.student_id
    if lessons is None:
        lessons = enrollment.course.lessons if enrollment.course else []

    completed = 0
    last_access: datetime | None = None
    for lesson in lessons:
        rows = filter_progress_for_student(lesson.lesson_progress, student_id)
        if any(row.is_completed for row in rows):
            completed += 1
        for row in rows:
            if row.last_accessed_at and (last_access is None or row.last_accessed_at > last_access):
                last_access = row.last_accessed_at

    total = len(lessons)
    course = enrollment.course
    if course and course.lesson_count is not None and course.lesson_count != total:
        logger.debug(
            f"Cached lesson_count {course.lesson_count} differs from {total} fetched lessons "
            f"for course {enrollment.course_id}"
        )

    return ProgressSummary(
        completed_count=completed,
        total_count=total,
        progress_percent=completion_percent(completed, total),
        last_access_at=last_access or enrollment.updated_at,
    )


def reconcile_enrollments(
    enrollments: Iterable[EnrollmentRow],
    student_id: str | None = None,
) -> list[ReconciledEnrollment]:
    """Reconcile a batch of enrollments, dropping those whose course join is null."""
    reconciled = []
    for enrollment in enrollments:
        if enrollment.course is None:
            logger.warning(f"Skipping enrollment {enrollment.id}: course {enrollment.course_id} is missing")
            continue
        summary = reconcile(enrollment, student_id=student_id)
        reconciled.append(
            ReconciledEnrollment(
                enrollment=enrollment,
                summary=summary,
                status=classify(summary.progress_percent, enrollment.completed_at),
            )
        )
    return reconciled
