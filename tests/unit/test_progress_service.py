"""Tests for the student and admin progress services."""

import pytest

from coursemart.enrollments.queries import (
    CERTIFICATES_TABLE,
    COURSES_TABLE,
    ENROLLMENTS_TABLE,
    LESSON_PROGRESS_TABLE,
    LESSONS_TABLE,
)
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.exceptions import DataFetchError, ResourceNotFoundError, ValidationError
from coursemart.mutations.service import MutationGateway
from coursemart.progress.service import (
    FETCH_DETAILS_FAILED,
    FETCH_ENROLLMENTS_FAILED,
    FETCH_PROGRESS_FAILED,
    AdminProgressService,
    StudentProgressService,
)
from tests.fixtures.rows import COURSE_ID, STUDENT_ID, course_row, enrollment_row, lesson_row, progress_row
from tests.fixtures.sessions import make_session
from tests.fixtures.supabase import FakeSupabase


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def student_service(db) -> StudentProgressService:
    repository = EnrollmentRepository(db)
    return StudentProgressService(repository, MutationGateway(db, repository))


@pytest.fixture
def admin_service(db) -> AdminProgressService:
    return AdminProgressService(EnrollmentRepository(db))


def _half_done_course() -> dict:
    lessons = [
        lesson_row("l1", 1, [progress_row("l1", last_accessed_at="2024-03-01T00:00:00+00:00")]),
        lesson_row("l2", 2),
    ]
    return course_row(lessons=lessons)


@pytest.mark.asyncio
async def test_dashboard(db, student_service) -> None:
    db.respond(
        ENROLLMENTS_TABLE,
        [
            enrollment_row("e1", course=_half_done_course()),
            enrollment_row("e2", course_id="c2", course=None),
        ],
    )
    db.respond(CERTIFICATES_TABLE, [], count=1)

    dashboard = await student_service.dashboard(make_session())

    assert dashboard.error is None
    assert dashboard.stats.total_enrolled == 1
    assert dashboard.stats.in_progress_courses == 1
    assert dashboard.stats.certificates == 1
    assert [card.enrollment_id for card in dashboard.recent_courses] == ["e1"]


@pytest.mark.asyncio
async def test_dashboard_failure_degrades_to_error(db, student_service) -> None:
    db.fail(ENROLLMENTS_TABLE)

    dashboard = await student_service.dashboard(make_session())

    assert dashboard.error == FETCH_ENROLLMENTS_FAILED
    assert dashboard.recent_courses == []
    assert dashboard.stats.total_enrolled == 0


@pytest.mark.asyncio
async def test_enrolled_courses_failure_is_empty_list_with_error(db, student_service) -> None:
    db.fail(ENROLLMENTS_TABLE)

    state = await student_service.enrolled_courses(make_session())

    assert state.items == []
    assert state.error == FETCH_ENROLLMENTS_FAILED


@pytest.mark.asyncio
async def test_course_progress_requires_enrollment(db, student_service) -> None:
    db.respond(ENROLLMENTS_TABLE, None)

    with pytest.raises(ResourceNotFoundError):
        await student_service.course_progress(make_session(), COURSE_ID)


@pytest.mark.asyncio
async def test_complete_lesson_stores_reconciled_progress(db, student_service) -> None:
    db.respond(LESSON_PROGRESS_TABLE, [{"lesson_id": "l2", "student_id": STUDENT_ID, "is_completed": True}])
    db.respond(ENROLLMENTS_TABLE, enrollment_row(progress=50))
    db.respond(ENROLLMENTS_TABLE, [{"id": "enrollment-1", "progress": 100}])
    db.respond(LESSONS_TABLE, [lesson_row("l1", 1, [progress_row("l1")]), lesson_row("l2", 2, [progress_row("l2")])])

    completion = await student_service.complete_lesson(make_session(), "l2", COURSE_ID)

    assert completion.result.ok
    assert completion.progress.summary.progress_percent == 100
    update = db.queries_for(ENROLLMENTS_TABLE)[1]
    (args, _) = update.called("update")[0]
    assert args[0]["progress"] == 100
    assert "completed_at" in args[0]


@pytest.mark.asyncio
async def test_complete_lesson_without_course_skips_sync(db, student_service) -> None:
    db.respond(LESSON_PROGRESS_TABLE, [])

    completion = await student_service.complete_lesson(make_session(), "l2")

    assert completion.result.ok
    assert completion.progress is None
    assert db.queries_for(ENROLLMENTS_TABLE) == []


@pytest.mark.asyncio
async def test_failed_completion_is_returned_without_sync(db, student_service) -> None:
    db.fail(LESSON_PROGRESS_TABLE)

    completion = await student_service.complete_lesson(make_session(), "l2", COURSE_ID)

    assert not completion.result.ok
    assert db.queries_for(ENROLLMENTS_TABLE) == []


@pytest.mark.asyncio
async def test_admin_table_filters_and_drops_missing_courses(db, admin_service) -> None:
    db.respond(
        ENROLLMENTS_TABLE,
        [
            enrollment_row("e1", progress=50, course=course_row()),
            enrollment_row("e2", progress=90, course=course_row()),
            enrollment_row("e3", progress=50, course=None),
        ],
    )

    state = await admin_service.progress_table(course_id=COURSE_ID, band="25-50")

    assert [row.enrollment_id for row in state.items] == ["e1"]


@pytest.mark.asyncio
async def test_admin_table_rejects_unknown_band_before_fetching(db, admin_service) -> None:
    with pytest.raises(ValidationError):
        await admin_service.progress_table(band="half")
    assert db.queries == []


@pytest.mark.asyncio
async def test_admin_table_failure(db, admin_service) -> None:
    db.fail(ENROLLMENTS_TABLE)

    state = await admin_service.progress_table()

    assert state.error == FETCH_PROGRESS_FAILED


@pytest.mark.asyncio
async def test_lesson_details_for_missing_enrollment(db, admin_service) -> None:
    db.respond(ENROLLMENTS_TABLE, None)

    with pytest.raises(ResourceNotFoundError):
        await admin_service.lesson_details("missing")


@pytest.mark.asyncio
async def test_lesson_details(db, admin_service) -> None:
    db.respond(ENROLLMENTS_TABLE, enrollment_row(progress=0, course={"title": "Intro"}))
    db.respond(LESSONS_TABLE, [lesson_row("l1", 1, [progress_row("l1")]), lesson_row("l2", 2)])

    view = await admin_service.lesson_details("enrollment-1")

    assert view.course_title == "Intro"
    assert view.summary.completed_count == 1
    assert view.stored_progress == 0


@pytest.mark.asyncio
async def test_course_options(db, admin_service) -> None:
    db.respond(COURSES_TABLE, [{"id": "c1", "title": "Algebra"}])

    state = await admin_service.course_options()

    assert [option.title for option in state.items] == ["Algebra"]


@pytest.mark.asyncio
async def test_enrollment_details_failure(db, admin_service) -> None:
    db.fail(ENROLLMENTS_TABLE)

    details = await admin_service.enrollment_details()

    assert details.error == FETCH_DETAILS_FAILED
    assert details.enrollments == []
    assert details.stats.total_enrollments == 0


@pytest.mark.asyncio
async def test_export_applies_filters(db, admin_service) -> None:
    db.respond(
        ENROLLMENTS_TABLE,
        [
            enrollment_row("e1", progress=20, course=course_row(), student={"full_name": "A", "email": "a@x.io"}),
            enrollment_row("e2", progress=80, course=course_row(), student={"full_name": "B", "email": "b@x.io"}),
            enrollment_row("e3", progress=10, course=None),
        ],
    )

    content = await admin_service.export_csv(band="0-25")

    lines = content.split("\n")
    assert len(lines) == 2
    assert lines[1].startswith("A,a@x.io,")


@pytest.mark.asyncio
async def test_export_failure_propagates(db, admin_service) -> None:
    db.fail(ENROLLMENTS_TABLE)

    with pytest.raises(DataFetchError):
        await admin_service.export_csv()


@pytest.mark.asyncio
async def test_admin_table_keeps_fractional_stored_progress(db, admin_service) -> None:
    db.respond(
        ENROLLMENTS_TABLE,
        [
            enrollment_row("e1", progress=50, course=course_row()),
            enrollment_row("e2", progress=66.67, course=course_row()),
        ],
    )

    state = await admin_service.progress_table(band="50-75")

    assert state.error is None
    assert [row.progress for row in state.items] == [50, 67]


@pytest.mark.asyncio
async def test_dashboard_ignores_unpublished_lessons(db, student_service) -> None:
    lessons = [
        lesson_row("l1", 1, [progress_row("l1")]),
        lesson_row("l2", 2, [progress_row("l2")]),
        {**lesson_row("l3", 3), "is_published": False},
    ]
    db.respond(ENROLLMENTS_TABLE, [enrollment_row(course=course_row(lessons=lessons))])
    db.respond(CERTIFICATES_TABLE, [], count=0)

    dashboard = await student_service.dashboard(make_session())

    assert dashboard.stats.completed_courses == 1
    assert dashboard.stats.in_progress_courses == 0
