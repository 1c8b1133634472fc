"""Per-course locks serializing admission and waitlist renumbering."""

from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class CourseLocks:
    """Registry of re-entrant locks keyed by course id.

    Locks for several courses are always taken in sorted id order so two
    bundle registrations touching the same courses cannot deadlock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, course_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(course_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[course_id] = lock
            return lock

    @contextmanager
    def hold(self, course_ids: Iterable[str]) -> Iterator[list[str]]:
        """Hold the locks for the given courses for the duration of the block."""
        ordered = sorted(set(course_ids))
        with ExitStack() as stack:
            for course_id in ordered:
                stack.enter_context(self._lock_for(course_id))
            yield ordered
