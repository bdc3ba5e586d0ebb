"""Tests for the course catalog list model."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from coursemart.courses.service import FETCH_COURSES_FAILED, CatalogOptions, CourseCatalog
from coursemart.enrollments.models import CatalogCourse
from coursemart.exceptions import DataFetchError


def _course(course_id: str) -> CatalogCourse:
    return CatalogCourse(id=course_id, title=f"Course {course_id}")


@pytest.mark.asyncio
async def test_load_populates_items() -> None:
    repository = AsyncMock()
    repository.list_catalog.return_value = [_course("c1")]
    catalog = CourseCatalog(repository)

    state = await catalog.load(CatalogOptions(search="py", limit=3))

    assert [course.id for course in state.items] == ["c1"]
    assert not state.loading
    assert state.error is None
    repository.list_catalog.assert_awaited_once_with(category_id=None, search="py", limit=3)


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_items() -> None:
    repository = AsyncMock()
    repository.list_catalog.side_effect = [[_course("c1")], DataFetchError("courses")]
    catalog = CourseCatalog(repository)

    await catalog.load()
    state = await catalog.load()

    assert [course.id for course in state.items] == ["c1"]
    assert state.error == FETCH_COURSES_FAILED
    assert not state.loading


@pytest.mark.asyncio
async def test_backend_message_is_surfaced() -> None:
    repository = AsyncMock()
    repository.list_catalog.side_effect = DataFetchError("courses", "JWT expired")
    catalog = CourseCatalog(repository)

    state = await catalog.load()

    assert state.error == "JWT expired"


@pytest.mark.asyncio
async def test_outdated_load_does_not_overwrite_newer_options() -> None:
    release_first = asyncio.Event()

    async def list_catalog(category_id=None, search=None, limit=None):
        if search == "old":
            await release_first.wait()
            return [_course("old")]
        return [_course("new")]

    repository = AsyncMock()
    repository.list_catalog.side_effect = list_catalog
    catalog = CourseCatalog(repository)

    first = asyncio.create_task(catalog.load(CatalogOptions(search="old")))
    await asyncio.sleep(0)
    await catalog.load(CatalogOptions(search="new"))
    release_first.set()
    await first

    assert [course.id for course in catalog.state.items] == ["new"]


@pytest.mark.asyncio
async def test_closed_catalog_ignores_loads() -> None:
    repository = AsyncMock()
    catalog = CourseCatalog(repository)
    catalog.close()

    state = await catalog.load()

    assert state.items == []
    repository.list_catalog.assert_not_awaited()
