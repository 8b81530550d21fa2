"""Log file naming and creation.

Layout: <base>/logs/<log_name>/<YYYYMM>/<DD>/<level>-<HH>[-<slot>].log
"""

from __future__ import annotations

import io
import os
from datetime import datetime
from pathlib import Path

from .models import Level

DIR_MODE = 0o777
FILE_MODE = 0o666


class LogFileError(OSError):
    """A log directory or file could not be created or opened."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"logtool: {message}: {path}")
        self.path = path


def log_dir(base_path: str | Path, log_name: str, ts: datetime) -> Path:
    """Directory holding one calendar day of logs for ``log_name``."""
    return Path(base_path) / "logs" / log_name / f"{ts.year:04d}{ts.month:02d}" / f"{ts.day:02d}"


def log_file_name(level: Level, ts: datetime, slot: int = 0) -> str:
    """File name for one hour (and size slot) of one level."""
    if slot <= 0:
        return f"{level.file_name}-{ts.hour:02d}.log"
    return f"{level.file_name}-{ts.hour:02d}-{slot}.log"


def resolve_log_path(
    base_path: str | Path, log_name: str, level: Level, ts: datetime, slot: int = 0
) -> Path:
    return log_dir(base_path, log_name, ts) / log_file_name(level, ts, slot)


def _opener(path: str, flags: int) -> int:
    return os.open(path, flags, FILE_MODE)


def open_log_file(
    base_path: str | Path,
    log_name: str,
    level: Level,
    ts: datetime,
    slot: int,
    *,
    buffer_size: int,
) -> tuple[Path, io.BufferedWriter]:
    """Create the directory tree and open the log file for appending.

    Returns the resolved path and a buffered binary writer of ``buffer_size``
    bytes. Raises LogFileError when either step fails.
    """
    path = resolve_log_path(base_path, log_name, level, ts, slot)
    directory = path.parent
    try:
        directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise LogFileError(f"cannot create log directory ({exc.strerror or exc})", directory) from exc

    try:
        f = open(path, "ab", buffering=buffer_size, opener=_opener)
    except OSError as exc:
        raise LogFileError(f"cannot open log file ({exc.strerror or exc})", path) from exc
    return path, f
