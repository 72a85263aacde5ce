"""In-flight work guard keyed by identity"""

from collections.abc import Iterator
from contextlib import contextmanager


class InFlightGuard:
    """Tracks keys whose work is currently running.

    A key can be held by one caller at a time. Acquisition never waits: a
    second caller is refused and is expected to drop its work. The guard is
    only safe within a single event loop, where ``try_acquire`` runs without
    yielding.
    """

    def __init__(self) -> None:
        self._active: set[str] = set()

    def __contains__(self, key: str) -> bool:
        return key in self._active

    def __len__(self) -> int:
        return len(self._active)

    def try_acquire(self, key: str) -> bool:
        if key in self._active:
            return False
        self._active.add(key)
        return True

    def release(self, key: str) -> None:
        self._active.discard(key)

    @contextmanager
    def hold(self, key: str) -> Iterator[bool]:
        """Hold ``key`` for the duration of the block.

        Yields:
            True if the key was acquired, False if it was already held
        """
        acquired = self.try_acquire(key)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(key)
