from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from logtool.core.models import Level
from logtool.core.paths import LogFileError
from logtool.core.stream import LevelFileStream

T0 = datetime(2025, 12, 30, 8, 12, 1)


def _stream(tmp_path: Path, **kwargs: int) -> LevelFileStream:
    return LevelFileStream(tmp_path, "app", Level.INFO, **kwargs)


def test_first_check_opens_slot_zero(tmp_path: Path) -> None:
    stream = _stream(tmp_path)
    assert not stream.is_open

    assert stream.check_rotate(T0) is True

    assert stream.is_open
    assert stream.slot == 0
    assert stream.opened_at == datetime(2025, 12, 30, 8)
    assert stream.path == tmp_path / "logs" / "app" / "202512" / "30" / "info-08.log"
    stream.close()


def test_same_hour_does_not_rotate(tmp_path: Path) -> None:
    stream = _stream(tmp_path)
    stream.check_rotate(T0)
    assert stream.check_rotate(T0.replace(minute=59, second=59)) is False
    stream.close()


def test_bytes_written_counts_buffered_bytes(tmp_path: Path) -> None:
    stream = _stream(tmp_path, buffer_size=4096)
    stream.check_rotate(T0)

    assert stream.write(b"0123456789") == 10

    assert stream.bytes_written == 10
    # Still only in the userspace buffer.
    assert stream.path is not None and stream.path.stat().st_size == 0
    stream.flush()
    assert stream.path.read_bytes() == b"0123456789"
    stream.close()


def test_hour_change_rotates_to_slot_zero_and_flushes_old_file(tmp_path: Path) -> None:
    stream = _stream(tmp_path, max_size=5)
    stream.check_rotate(T0)
    stream.write(b"123456")
    stream.check_rotate(T0)
    assert stream.slot == 1
    first_slot_path = stream.path
    stream.write(b"abc")

    assert stream.check_rotate(T0.replace(hour=9, minute=0)) is True

    assert stream.slot == 0
    assert stream.bytes_written == 0
    assert stream.path is not None and stream.path.name == "info-09.log"
    assert first_slot_path is not None and first_slot_path.read_bytes() == b"abc"
    stream.close()


def test_date_change_with_same_hour_rotates(tmp_path: Path) -> None:
    stream = _stream(tmp_path)
    stream.check_rotate(T0)
    assert stream.check_rotate(T0.replace(day=31)) is True
    assert stream.path is not None and stream.path.parent.name == "31"
    stream.close()


def test_size_threshold_rotates_to_next_slot(tmp_path: Path) -> None:
    stream = _stream(tmp_path, max_size=10)
    stream.check_rotate(T0)
    stream.write(b"x" * 9)
    assert stream.check_rotate(T0) is False
    stream.write(b"y")

    assert stream.check_rotate(T0) is True

    assert stream.slot == 1
    assert stream.path is not None and stream.path.name == "info-08-1.log"
    assert (stream.path.parent / "info-08.log").read_bytes() == b"x" * 9 + b"y"
    stream.close()


def test_failed_rotation_leaves_stream_closed_and_retries(tmp_path: Path) -> None:
    base = tmp_path / "base"
    base.write_text("blocks directory creation")
    stream = LevelFileStream(base, "app", Level.ERROR)

    with pytest.raises(LogFileError):
        stream.check_rotate(T0)
    assert not stream.is_open

    base.unlink()
    assert stream.check_rotate(T0) is True
    assert stream.is_open
    stream.close()


def test_write_without_open_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="no open file"):
        _stream(tmp_path).write(b"x")


def test_close_then_reopen_appends(tmp_path: Path) -> None:
    stream = _stream(tmp_path)
    stream.check_rotate(T0)
    stream.write(b"one\n")
    stream.close()
    assert not stream.is_open
    stream.flush()  # no-op when closed

    stream.check_rotate(T0)
    stream.write(b"two\n")
    stream.close()

    assert (tmp_path / "logs" / "app" / "202512" / "30" / "info-08.log").read_bytes() == b"one\ntwo\n"


class _FlushFails:
    def __init__(self, real) -> None:
        self.real = real

    def flush(self) -> None:
        raise OSError(28, "No space left on device")

    def __getattr__(self, name: str):
        return getattr(self.real, name)


def test_close_errors_are_kept_for_the_owner(tmp_path: Path) -> None:
    stream = _stream(tmp_path)
    stream.check_rotate(T0)
    real = stream.file
    stream.file = _FlushFails(real)

    stream.close()

    assert real.closed
    ((path, exc),) = stream.take_close_errors()
    assert path == stream.path
    assert exc.errno == 28
    assert stream.take_close_errors() == []
