"""Scoped lifetimes for view fetches.

A ``ViewScope`` belongs to one consuming view. Each ``run`` starts a new
generation; only the newest generation may apply its result, and nothing is
applied after the scope is closed. In-flight fetches are cancelled on close.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ScopedResult(Generic[T]):
    """Outcome of a scoped fetch. ``value`` is only meaningful when ``applied``."""

    value: T | None
    applied: bool
    generation: int


class ViewScope:
    """Last-request-wins guard with explicit close."""

    def __init__(self, name: str = "view") -> None:
        self.name = name
        self._generation = 0
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """Check whether results of ``generation`` may still be applied."""
        return not self._closed and generation == self._generation

    async def run(self, fetch: Callable[[], Awaitable[T]]) -> ScopedResult[T]:
        """Run ``fetch`` and report whether its result is still wanted.

        Errors raised by a superseded fetch are dropped along with its result;
        errors of the current fetch propagate to the caller.
        """
        if self._closed:
            logger.debug(f"Scope {self.name} is closed, skipping fetch")
            return ScopedResult(value=None, applied=False, generation=self._generation)

        self._generation += 1
        generation = self._generation
        task = asyncio.ensure_future(fetch())
        self._tasks.add(task)

        try:
            value = await task
        except asyncio.CancelledError:
            if not self._closed:
                raise
            logger.debug(f"Scope {self.name} closed while generation {generation} was in flight")
            return ScopedResult(value=None, applied=False, generation=generation)
        except Exception:
            if self.is_current(generation):
                raise
            logger.debug(f"Dropping failure of superseded generation {generation} in scope {self.name}")
            return ScopedResult(value=None, applied=False, generation=generation)
        finally:
            self._tasks.discard(task)

        if not self.is_current(generation):
            logger.debug(f"Dropping stale result of generation {generation} in scope {self.name}")
            return ScopedResult(value=None, applied=False, generation=generation)

        return ScopedResult(value=value, applied=True, generation=generation)

    def close(self) -> None:
        """Stop applying results and cancel everything still in flight."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
