"""Course catalog, enrollment and lesson progress endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request, Response, status

from coursemart.auth import AuthenticatedSession, UserClient
from coursemart.config import get_settings
from coursemart.core.schemas import ListState
from coursemart.enrollments.models import CatalogCourse
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.middleware.error_handlers import ExternalServiceError
from coursemart.middleware.security import mutation_rate_limit
from coursemart.mutations.schemas import LessonCompletionRequest, MutationResult
from coursemart.mutations.service import MutationGateway
from coursemart.progress.dependencies import StudentProgress
from coursemart.progress.schemas import LessonCompletionResponse, LessonProgressResponse

from .service import CatalogOptions, CourseCatalog


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["courses"])


def raise_for_failure(result: MutationResult) -> MutationResult:
    """Turn a failed write into a 503 response."""
    if not result.ok:
        raise ExternalServiceError("Supabase", result.error or "Write failed")
    return result


@router.get("/courses")
async def list_courses(
    client: UserClient,
    category_id: Annotated[str | None, Query(description="Only courses in this category")] = None,
    search: Annotated[str | None, Query(description="Case-insensitive match on title or description")] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> ListState[CatalogCourse]:
    """List approved courses, newest first."""
    catalog = CourseCatalog(EnrollmentRepository(client))
    try:
        return await catalog.load(
            CatalogOptions(
                category_id=category_id,
                search=search,
                limit=limit or get_settings().CATALOG_DEFAULT_LIMIT,
            )
        )
    finally:
        catalog.close()


@router.post("/courses/{course_id}/enroll")
@mutation_rate_limit
async def enroll_in_course(
    request: Request,  # noqa: ARG001
    response: Response,
    course_id: str,
    session: AuthenticatedSession,
    client: UserClient,
) -> MutationResult:
    """Enroll the signed-in student; an existing enrollment is returned unchanged."""
    gateway = MutationGateway(client)
    result = raise_for_failure(await gateway.enroll(session, course_id))
    if result.created:
        response.status_code = status.HTTP_201_CREATED
    return result


@router.get("/courses/{course_id}/learn")
async def get_course_progress(
    course_id: str,
    session: AuthenticatedSession,
    service: StudentProgress,
) -> LessonProgressResponse:
    """Published lessons with the signed-in student's completion badges."""
    return await service.course_progress(session, course_id)


@router.post("/lessons/{lesson_id}/complete")
@mutation_rate_limit
async def complete_lesson(
    request: Request,  # noqa: ARG001
    lesson_id: str,
    session: AuthenticatedSession,
    service: StudentProgress,
    payload: LessonCompletionRequest | None = None,
) -> LessonCompletionResponse:
    """Mark a lesson complete for the signed-in student."""
    course_id = payload.course_id if payload else None
    completion = await service.complete_lesson(session, lesson_id, course_id)
    raise_for_failure(completion.result)
    logger.debug(f"Lesson {lesson_id} completion refetch: {completion.result.refetch}")
    return completion


@router.post("/lessons/{lesson_id}/access")
async def record_lesson_access(
    lesson_id: str,
    session: AuthenticatedSession,
    service: StudentProgress,
) -> MutationResult:
    """Stamp the last time the signed-in student opened a lesson."""
    return raise_for_failure(await service.record_access(session, lesson_id))
