"""Reusable byte buffers for line assembly."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

MAX_REUSE_SIZE = 256
MAX_FREE = 1024


class BufferPool:
    """Free list of small ``bytearray`` buffers.

    A buffer belongs to exactly one caller between ``acquire`` and
    ``release``. Buffers that grew to ``max_reuse_size`` bytes or more are
    dropped on release instead of being kept, so the pool only ever holds
    small buffers.
    """

    def __init__(self, *, max_reuse_size: int = MAX_REUSE_SIZE, max_free: int = MAX_FREE) -> None:
        if max_reuse_size < 1:
            raise ValueError("max_reuse_size must be >= 1")
        if max_free < 0:
            raise ValueError("max_free must be >= 0")
        self.max_reuse_size = max_reuse_size
        self.max_free = max_free
        self._free: list[bytearray] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._free)

    def acquire(self) -> bytearray:
        """Return an empty buffer, recycled when one is available."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return bytearray()

    def release(self, buf: bytearray) -> None:
        """Hand ``buf`` back; the caller must not touch it afterwards."""
        if len(buf) >= self.max_reuse_size:
            return
        buf.clear()
        with self._lock:
            if len(self._free) < self.max_free:
                self._free.append(buf)

    @contextmanager
    def borrow(self) -> Iterator[bytearray]:
        buf = self.acquire()
        try:
            yield buf
        finally:
            self.release(buf)
