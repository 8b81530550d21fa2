"""One rotating file destination for one level."""

from __future__ import annotations

import io
import os
from datetime import datetime
from pathlib import Path

from .config import BUFFER_SIZE, MAX_SIZE
from .models import Level
from .paths import open_log_file


def _hour_key(ts: datetime) -> tuple[int, int, int, int]:
    return ts.year, ts.month, ts.day, ts.hour


class LevelFileStream:
    """Rotating buffered file for a single (log name, level) pair.

    Not thread-safe on its own: the owning writer serializes every call.
    At most one file is open at a time; its name is determined by the
    rotation key (date, hour, slot).
    """

    def __init__(
        self,
        base_path: str | Path,
        log_name: str,
        level: Level,
        *,
        max_size: int = MAX_SIZE,
        buffer_size: int = BUFFER_SIZE,
    ) -> None:
        self.base_path = Path(base_path)
        self.log_name = log_name
        self.level = level
        self.max_size = max_size
        self.buffer_size = buffer_size

        self.file: io.BufferedWriter | None = None
        self.path: Path | None = None
        self.opened_at: datetime | None = None
        self.slot = 0
        # Bytes accepted by the buffered writer since the file was opened.
        self.bytes_written = 0
        # Failures from closing replaced files, reported by the owner
        # once its lock is released.
        self.close_errors: list[tuple[Path | None, OSError]] = []

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def check_rotate(self, now: datetime) -> bool:
        """Rotate if needed before writing at ``now``; return True if rotated.

        Hour (or date) changes win over size: a new hour always starts at
        slot 0. Raises LogFileError when the new file cannot be opened.
        """
        if self.file is None or self.opened_at is None:
            self.rotate(now, 0)
            return True
        if _hour_key(now) != _hour_key(self.opened_at):
            self.rotate(now, 0)
            return True
        if self.bytes_written >= self.max_size:
            self.rotate(now, self.slot + 1)
            return True
        return False

    def rotate(self, now: datetime, slot: int) -> None:
        """Close the current file and open the one for (now, slot)."""
        self._close_current()
        path, f = open_log_file(
            self.base_path,
            self.log_name,
            self.level,
            now,
            slot,
            buffer_size=self.buffer_size,
        )
        self.file = f
        self.path = path
        self.bytes_written = 0
        self.opened_at = now.replace(minute=0, second=0, microsecond=0)
        self.slot = slot

    def write(self, data: bytes | bytearray | memoryview) -> int:
        if self.file is None:
            raise ValueError(f"no open file for level {self.level.file_name}")
        n = self.file.write(data)
        self.bytes_written += n
        return n

    def flush(self, *, sync: bool = True) -> None:
        """Hand buffered bytes to the OS and optionally fsync them."""
        if self.file is None:
            return
        self.file.flush()
        if sync:
            os.fsync(self.file.fileno())

    def close(self) -> None:
        """Flush and close the current file; the next write reopens."""
        self._close_current()

    def _close_current(self) -> None:
        f, path = self.file, self.path
        self.file = None
        if f is None:
            return
        try:
            f.flush()
        except OSError as exc:
            self.close_errors.append((path, exc))
        try:
            f.close()
        except OSError as exc:
            self.close_errors.append((path, exc))

    def take_close_errors(self) -> list[tuple[Path | None, OSError]]:
        errors, self.close_errors = self.close_errors, []
        return errors
