"""Course catalog list model."""

import logging
from dataclasses import dataclass

from coursemart.core.lifetime import ViewScope
from coursemart.core.schemas import ListState
from coursemart.enrollments.models import CatalogCourse
from coursemart.enrollments.repository import EnrollmentRepository
from coursemart.exceptions import DataFetchError


logger = logging.getLogger(__name__)

FETCH_COURSES_FAILED = "Failed to fetch courses"


@dataclass(frozen=True)
class CatalogOptions:
    """Catalog filters."""

    category_id: str | None = None
    search: str | None = None
    limit: int | None = None


class CourseCatalog:
    """Holds the catalog list state for one consuming view.

    ``load`` can be called again whenever the options change; a load that is
    overtaken by a newer one, or that finishes after ``close``, does not touch
    the state.
    """

    def __init__(self, repository: EnrollmentRepository, scope: ViewScope | None = None) -> None:
        self.repository = repository
        self.scope = scope or ViewScope("course-catalog")
        self.state: ListState[CatalogCourse] = ListState[CatalogCourse](loading=True)

    async def load(self, options: CatalogOptions | None = None) -> ListState[CatalogCourse]:
        """Fetch the catalog for ``options`` and return the resulting state."""
        options = options or CatalogOptions()
        self.state = self.state.model_copy(update={"loading": True})

        try:
            result = await self.scope.run(
                lambda: self.repository.list_catalog(
                    category_id=options.category_id,
                    search=options.search,
                    limit=options.limit,
                )
            )
        except DataFetchError as e:
            # Keep whatever was shown before; only the error changes
            self.state = ListState[CatalogCourse](
                items=self.state.items,
                loading=False,
                error=e.detail or FETCH_COURSES_FAILED,
            )
            return self.state

        if result.applied:
            self.state = ListState[CatalogCourse](items=result.value or [], loading=False)
        return self.state

    def close(self) -> None:
        """Release the view; pending loads are cancelled and ignored."""
        self.scope.close()
