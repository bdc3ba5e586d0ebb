"""Ready-made session contexts."""

from coursemart.auth.session import SessionContext, SessionStatus, SessionUser
from coursemart.enrollments.models import Profile

from .rows import STUDENT_ID


def make_session(user_id: str = STUDENT_ID, role: str = "student", email: str = "sam@example.com") -> SessionContext:
    return SessionContext(
        user=SessionUser(id=user_id, email=email),
        profile=Profile(user_id=user_id, email=email, full_name="Sam Student", role=role),
        status=SessionStatus.AUTHENTICATED,
        access_token="test-token",  # noqa: S106
    )
