"""Buffer handle allocation and pool bookkeeping."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass

from yulegpu.core import BufferHandle

_counter = itertools.count(1)
_counter_lock = threading.Lock()


def next_buffer_handle() -> BufferHandle:
    """Return a process-wide unique, increasing buffer handle."""
    with _counter_lock:
        return BufferHandle(next(_counter))


@dataclass
class _AllocatedBuffer:
    size: int
    in_use: bool


class BufferPool:
    """Tracks device memory against a fixed capacity."""

    def __init__(self, max_bytes: int) -> None:
        self._allocated: dict[int, _AllocatedBuffer] = {}
        self._total_bytes = 0
        self._max_bytes = max_bytes

    def total_allocated(self) -> int:
        """Bytes currently allocated from the pool."""
        return self._total_bytes

    def max_capacity(self) -> int:
        """Largest number of bytes the pool may hold."""
        return self._max_bytes