from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from logtool.core.config import LogConfig
from logtool.core.writer import RotatingFileWriter


class FakeClock:
    """Settable wall clock for rotation tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LOGTOOL_NAME", "LOGTOOL_PATH", "LOGTOOL_LEVEL", "LOGTOOL_ALSO_STDOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 12, 30, 8, 12, 1, 123456))


@pytest.fixture
def day_dir(tmp_path: Path) -> Path:
    """Directory the `app` log writes to on the fake clock's day."""
    return tmp_path / "logs" / "app" / "202512" / "30"


@pytest.fixture
def make_writer(
    tmp_path: Path, clock: FakeClock
) -> Iterator[Callable[..., RotatingFileWriter]]:
    writers: list[RotatingFileWriter] = []

    def _make(*, start_daemon: bool = False, **overrides: object) -> RotatingFileWriter:
        cfg = LogConfig(log_name="app", base_path=tmp_path, **overrides)
        writer = RotatingFileWriter(cfg, clock=clock, start_daemon=start_daemon)
        writers.append(writer)
        return writer

    yield _make

    for writer in writers:
        writer.close()
