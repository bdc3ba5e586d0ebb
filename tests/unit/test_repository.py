"""Tests for the enrollment row fetcher."""

import pytest

from coursemart.enrollments.queries import (
    CERTIFICATES_TABLE,
    COURSES_TABLE,
    ENROLLMENTS_TABLE,
    LESSONS_TABLE,
    STUDENT_ENROLLMENTS_SELECT,
)
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.exceptions import DataFetchError
from tests.fixtures.rows import COURSE_ID, STUDENT_ID, course_row, enrollment_row, lesson_row
from tests.fixtures.supabase import FakeSupabase


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def repository(db) -> EnrollmentRepository:
    return EnrollmentRepository(db)


@pytest.mark.asyncio
async def test_student_enrollments_are_filtered_by_student(db, repository) -> None:
    db.respond(ENROLLMENTS_TABLE, [enrollment_row(course=course_row(lessons=[lesson_row("l1", 1)]))])

    enrollments = await repository.list_student_enrollments(STUDENT_ID)

    assert enrollments[0].course.lessons[0].id == "l1"
    query = db.queries_for(ENROLLMENTS_TABLE)[0]
    assert query.called("select")[0][0] == (STUDENT_ENROLLMENTS_SELECT,)
    assert (("student_id", STUDENT_ID), {}) in query.called("eq")
    assert (("course.lessons.is_published", True), {}) in query.called("eq")


@pytest.mark.asyncio
async def test_completed_enrollments_newest_first(db, repository) -> None:
    db.respond(ENROLLMENTS_TABLE, [])

    await repository.list_completed_enrollments(STUDENT_ID)

    query = db.queries_for(ENROLLMENTS_TABLE)[0]
    assert query.called("gte")[0][0] == ("progress", 100)
    assert query.called("order")[0] == (("completed_at",), {"desc": True})


@pytest.mark.asyncio
async def test_published_lessons_in_display_order(db, repository) -> None:
    db.respond(LESSONS_TABLE, [lesson_row("l1", 1, None)])

    lessons = await repository.list_lessons_with_progress(COURSE_ID, STUDENT_ID, published_only=True)

    assert lessons[0].lesson_progress == []
    query = db.queries_for(LESSONS_TABLE)[0]
    eq_args = [args for args, _ in query.called("eq")]
    assert ("course_id", COURSE_ID) in eq_args
    assert ("is_published", True) in eq_args
    assert ("lesson_progress.student_id", STUDENT_ID) in eq_args
    assert query.called("order")[0][0] == ("order_index",)


@pytest.mark.asyncio
async def test_catalog_applies_optional_filters(db, repository) -> None:
    db.respond(COURSES_TABLE, [{"id": "c1", "title": "Python"}])

    courses = await repository.list_catalog(category_id="cat-1", search="py", limit=5)

    assert courses[0].title == "Python"
    query = db.queries_for(COURSES_TABLE)[0]
    assert ("category_id", "cat-1") in [args for args, _ in query.called("eq")]
    assert query.called("or_")[0][0] == ("title.ilike.%py%,description.ilike.%py%",)
    assert query.called("limit")[0][0] == (5,)


@pytest.mark.asyncio
async def test_catalog_without_filters(db, repository) -> None:
    db.respond(COURSES_TABLE, [])

    await repository.list_catalog()

    query = db.queries_for(COURSES_TABLE)[0]
    assert query.called("or_") == []
    assert query.called("limit") == []


@pytest.mark.asyncio
async def test_service_failure_becomes_fetch_error(db, repository) -> None:
    db.fail(ENROLLMENTS_TABLE, "connection reset")

    with pytest.raises(DataFetchError) as exc_info:
        await repository.list_all_enrollments()

    assert exc_info.value.detail == "connection reset"


@pytest.mark.asyncio
async def test_malformed_row_becomes_fetch_error(db, repository) -> None:
    db.respond(ENROLLMENTS_TABLE, [{"id": "e1"}])

    with pytest.raises(DataFetchError, match="malformed row"):
        await repository.list_enrollment_details()


@pytest.mark.asyncio
async def test_missing_enrollment_is_none(db, repository) -> None:
    db.respond(ENROLLMENTS_TABLE, None)

    assert await repository.get_enrollment("missing") is None


@pytest.mark.asyncio
async def test_certificate_count_prefers_exact_count(db, repository) -> None:
    db.respond(CERTIFICATES_TABLE, [{"id": "x"}], count=3)
    db.respond(CERTIFICATES_TABLE, [{"id": "x"}, {"id": "y"}])

    assert await repository.count_certificates(STUDENT_ID) == 3
    assert await repository.count_certificates(STUDENT_ID) == 2


@pytest.mark.asyncio
async def test_unpublished_nested_lessons_are_dropped(db, repository) -> None:
    lessons = [lesson_row("l1", 1), {**lesson_row("l2", 2), "is_published": False}]
    db.respond(ENROLLMENTS_TABLE, [enrollment_row(progress=33.5, course=course_row(lessons=lessons))])

    (enrollment,) = await repository.list_student_enrollments(STUDENT_ID)

    assert [lesson.id for lesson in enrollment.course.lessons] == ["l1"]
    assert enrollment.progress == 34
