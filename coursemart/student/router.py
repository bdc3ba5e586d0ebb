"""Student dashboard, course list and feedback endpoints."""

import logging

from fastapi import APIRouter, Request, Response, status

from coursemart.auth import AuthenticatedSession
from coursemart.core.schemas import ListState
from coursemart.courses.router import raise_for_failure
from coursemart.middleware.security import mutation_rate_limit
from coursemart.mutations.schemas import FeedbackRequest, MutationResult
from coursemart.progress.dependencies import StudentProgress
from coursemart.progress.schemas import CourseCard, FeedbackCandidate, StudentDashboardResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/student", tags=["student"])


@router.get("/dashboard")
async def get_dashboard(session: AuthenticatedSession, service: StudentProgress) -> StudentDashboardResponse:
    """Enrollment stats and the in-progress courses to continue."""
    return await service.dashboard(session)


@router.get("/courses")
async def list_enrolled_courses(session: AuthenticatedSession, service: StudentProgress) -> ListState[CourseCard]:
    """All enrolled courses with reconciled progress."""
    return await service.enrolled_courses(session)


@router.get("/feedback")
async def list_feedback_candidates(
    session: AuthenticatedSession,
    service: StudentProgress,
) -> ListState[FeedbackCandidate]:
    """Completed courses and the feedback already given on them."""
    return await service.feedback_candidates(session)


@router.post("/feedback")
@mutation_rate_limit
async def submit_feedback(
    request: Request,  # noqa: ARG001
    response: Response,
    payload: FeedbackRequest,
    session: AuthenticatedSession,
    service: StudentProgress,
) -> MutationResult:
    """Create or update feedback for a completed course."""
    result = raise_for_failure(
        await service.submit_feedback(session, payload.course_id, payload.rating, payload.comment)
    )
    if result.created:
        response.status_code = status.HTTP_201_CREATED
    logger.info(f"Feedback for course {payload.course_id} saved by student {session.user_id}")
    return result
