"""FastAPI dependencies for the progress services."""

from typing import Annotated

from fastapi import Depends

from coursemart.auth import UserClient
from coursemart.config import get_settings
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.mutations.service import MutationGateway

from .service import AdminProgressService, StudentProgressService


def get_student_progress_service(client: UserClient) -> StudentProgressService:
    """Student views and writes acting as the caller."""
    repository = EnrollmentRepository(client)
    return StudentProgressService(
        repository,
        MutationGateway(client, repository),
        recent_limit=get_settings().RECENT_COURSES_LIMIT,
    )


def get_admin_progress_service(client: UserClient) -> AdminProgressService:
    return AdminProgressService(EnrollmentRepository(client))


StudentProgress = Annotated[StudentProgressService, Depends(get_student_progress_service)]
AdminProgress = Annotated[AdminProgressService, Depends(get_admin_progress_service)]
