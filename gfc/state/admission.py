"""
Thread-safe admission control for concurrent builds.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from gfc.core.exceptions import AdmissionRejected


class AdmissionController:
    """Bounded counter of builds currently running."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._in_use = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        """Number of slots currently held."""
        with self._lock:
            return self._in_use

    def reserve(self) -> bool:
        """Take a slot if one is free. The counter is unchanged on failure."""
        with self._lock:
            if self._in_use + 1 > self._capacity:
                return False
            self._in_use += 1
            return True

    def release(self) -> None:
        """Return a slot taken by a successful reserve()."""
        with self._lock:
            if self._in_use <= 0:
                raise RuntimeError("release() called without a matching reserve()")
            self._in_use -= 1

    @contextmanager
    def reserved(self) -> Iterator[None]:
        """
        Hold one slot for the duration of the block.

        Raises:
            AdmissionRejected: If all slots are taken; nothing is released then
        """
        if not self.reserve():
            raise AdmissionRejected(f"all {self._capacity} build slots in use")
        try:
            yield
        finally:
            self.release()
