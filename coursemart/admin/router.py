"""Admin progress tracking and enrollment reporting endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Response

from coursemart.auth import AdminSession
from coursemart.config import get_settings
from coursemart.core.schemas import ListState
from coursemart.enrollments.models import CourseOption
from coursemart.progress.dependencies import AdminProgress
from coursemart.progress.filters import ALL
from coursemart.progress.schemas import EnrollmentDetailsResponse, LessonProgressResponse, StudentProgressRow


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

CourseFilter = Annotated[str, Query(description="Course id, or 'all'")]
BandFilter = Annotated[str, Query(description="One of 'all', '0-25', '25-50', '50-75', '75-100'")]


@router.get("/progress")
async def get_student_progress(
    session: AdminSession,  # noqa: ARG001
    service: AdminProgress,
    course: CourseFilter = ALL,
    band: BandFilter = ALL,
) -> ListState[StudentProgressRow]:
    """Student progress table filtered by course and progress band."""
    return await service.progress_table(course_id=course, band=band)


@router.get("/progress/{enrollment_id}/lessons")
async def get_enrollment_lessons(
    enrollment_id: str,
    session: AdminSession,  # noqa: ARG001
    service: AdminProgress,
) -> LessonProgressResponse:
    """Lesson-by-lesson completion for one enrollment."""
    return await service.lesson_details(enrollment_id)


@router.get("/courses/options")
async def get_course_options(session: AdminSession, service: AdminProgress) -> ListState[CourseOption]:  # noqa: ARG001
    """Courses for the progress table's course filter."""
    return await service.course_options()


@router.get("/enrollments")
async def get_enrollment_details(session: AdminSession, service: AdminProgress) -> EnrollmentDetailsResponse:  # noqa: ARG001
    """All enrollments with aggregate stats."""
    return await service.enrollment_details()


@router.get("/enrollments/export")
async def export_enrollments(
    session: AdminSession,
    service: AdminProgress,
    course: CourseFilter = ALL,
    band: BandFilter = ALL,
) -> Response:
    """Download the filtered enrollment details as CSV."""
    content = await service.export_csv(course_id=course, band=band)
    filename = get_settings().EXPORT_FILENAME
    logger.info(f"Enrollment export requested by admin {session.user_id}")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
