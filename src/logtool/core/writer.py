"""Rotating multiplexed file writer.

Routes (level, text) records to one LevelFileStream per level under a single
lock and runs a background thread that periodically flushes every stream.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from .buffer_pool import BufferPool
from .config import LogConfig
from .models import Level
from .paths import LogFileError
from .stream import LevelFileStream

logger = logging.getLogger(__name__)
fallback = logging.getLogger("logtool.fallback")

Clock = Callable[[], datetime]
_Report = tuple[str, tuple[object, ...]]


def format_timestamp(now: datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS.mmm `` (note the trailing space)."""
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d} "


def format_line(
    level: Level,
    text: str,
    now: datetime,
    prefix: str = "",
    *,
    out: bytearray | None = None,
) -> bytearray:
    """Assemble one newline-terminated record.

    ACTION records carry no timestamp: their payload is a self-contained
    serialized record. A trailing newline is added only when missing.
    """
    buf = out if out is not None else bytearray()
    if level != Level.ACTION:
        buf += format_timestamp(now).encode("ascii")
    if prefix:
        buf += prefix.encode("utf-8", errors="replace")
    buf += text.encode("utf-8", errors="replace")
    if not buf.endswith(b"\n"):
        buf += b"\n"
    return buf


class RotatingFileWriter:
    """Per-level, hourly rotating, buffered file writer for one log name.

    Safe to call from any number of threads. ``exit()`` (or ``close()``)
    must run before the process ends; otherwise up to ``flush_interval``
    seconds of records may be lost.
    """

    def __init__(
        self,
        config: LogConfig | None = None,
        *,
        clock: Clock | None = None,
        pool: BufferPool | None = None,
        start_daemon: bool = True,
    ) -> None:
        self.config = config or LogConfig()
        self._clock: Clock = clock or datetime.now
        self._pool = pool or BufferPool()
        self._streams: dict[Level, LevelFileStream] = {}
        self._lock = threading.Lock()
        self._local = threading.local()

        self._stop = threading.Event()
        self._daemon: threading.Thread | None = None
        if start_daemon:
            self._daemon = threading.Thread(
                target=self._flush_daemon,
                name=f"logtool-flush-{self.config.log_name}",
                daemon=True,
            )
            self._daemon.start()

    def __enter__(self) -> RotatingFileWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def log_name(self) -> str:
        return self.config.log_name

    def stream(self, level: Level) -> LevelFileStream | None:
        """The stream for ``level`` if one was created (for inspection)."""
        with self._lock:
            return self._streams.get(level)

    def write(self, level: Level, text: str, prefix: str = "") -> bool:
        """Append one record; return False if it had to be dropped.

        I/O failures are reported on the fallback logger and never raised.
        """
        now = self._clock()
        reports: list[_Report] = []
        ok = True
        with self._pool.borrow() as buf:
            format_line(level, text, now, prefix, out=buf)
            with self._lock:
                stream = self._streams.get(level)
                if stream is None:
                    stream = LevelFileStream(
                        self.config.base_path,
                        self.config.log_name,
                        level,
                        max_size=self.config.max_size,
                        buffer_size=self.config.buffer_size,
                    )
                    self._streams[level] = stream
                try:
                    stream.check_rotate(now)
                    stream.write(buf)
                except LogFileError as exc:
                    reports.append(("logtool: check rotate err: %s", (exc,)))
                    ok = False
                except (OSError, ValueError) as exc:
                    reports.append(("logtool: write to %s log failed: %s", (level.file_name, exc)))
                    ok = False
                reports.extend(_close_reports(stream))
        self._report(reports)
        return ok

    def flush_all(self) -> None:
        """Flush and fsync every open stream; failures are reported, not raised."""
        reports: list[_Report] = []
        with self._lock:
            for level, stream in self._streams.items():
                if not stream.is_open:
                    continue
                try:
                    stream.flush(sync=True)
                except (OSError, ValueError) as exc:
                    reports.append(("logtool: flush of %s log failed: %s", (level.file_name, exc)))
        self._report(reports)

    def exit(self) -> None:
        """Stop the flush daemon and flush synchronously. Safe to repeat."""
        self._stop.set()
        daemon = self._daemon
        if daemon is not None and daemon is not threading.current_thread():
            daemon.join()
        self.flush_all()

    def close(self) -> None:
        """``exit()`` and release every file handle."""
        self.exit()
        reports: list[_Report] = []
        with self._lock:
            for stream in self._streams.values():
                stream.close()
                reports.extend(_close_reports(stream))
        self._report(reports)

    def _report(self, reports: list[_Report]) -> None:
        # Runs without the writer lock: the fallback logger may be routed
        # back into this writer (e.g. stderr redirected to a LevelStream).
        # A failure while reporting on the same thread is dropped.
        if not reports or getattr(self._local, "reporting", False):
            return
        self._local.reporting = True
        try:
            for msg, args in reports:
                fallback.error(msg, *args)
        finally:
            self._local.reporting = False

    def _flush_daemon(self) -> None:
        interval = self.config.flush_interval
        logger.debug("flush daemon started for %s (every %ss)", self.config.log_name, interval)
        while not self._stop.wait(interval):
            self.flush_all()
        logger.debug("flush daemon stopped for %s", self.config.log_name)


def _close_reports(stream: LevelFileStream) -> list[_Report]:
    return [
        ("logtool: close of %s failed: %s", (path, exc)) for path, exc in stream.take_close_errors()
    ]
