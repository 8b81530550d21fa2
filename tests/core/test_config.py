from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from logtool.core.config import LogConfig, resolve_config
from logtool.core.models import Level


def test_defaults() -> None:
    cfg = LogConfig()
    assert cfg.log_name == "logtool"
    assert cfg.base_path == Path("/data")
    assert cfg.level is Level.DEBUG
    assert cfg.also_stdout is False
    assert cfg.max_size == 1800 * 1024 * 1024
    assert cfg.buffer_size == 256 * 1024
    assert cfg.flush_interval == 5.0


@pytest.mark.parametrize("name", ["", "   ", "a/b", ".."])
def test_invalid_log_name(name: str) -> None:
    with pytest.raises(ValidationError, match="log name"):
        LogConfig(log_name=name)


def test_level_accepts_names() -> None:
    assert LogConfig(level="warn").level is Level.WARN


@pytest.mark.parametrize("level", ["output", "action", Level.ACTION, Level.DEFAULT, 9])
def test_level_must_be_filterable(level: object) -> None:
    with pytest.raises(ValueError):
        LogConfig(level=level)


@pytest.mark.parametrize("field", ["max_size", "buffer_size", "flush_interval"])
def test_sizes_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        LogConfig(**{field: 0})


def test_config_is_frozen() -> None:
    cfg = LogConfig()
    with pytest.raises(ValidationError):
        cfg.log_name = "other"


def test_resolve_config_without_env_returns_same_object() -> None:
    cfg = LogConfig(log_name="svc")
    assert resolve_config(cfg) is cfg


def test_resolve_config_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LOGTOOL_NAME", "from-env")
    monkeypatch.setenv("LOGTOOL_PATH", str(tmp_path))
    monkeypatch.setenv("LOGTOOL_LEVEL", "error")
    monkeypatch.setenv("LOGTOOL_ALSO_STDOUT", "yes")

    cfg = resolve_config(LogConfig(log_name="svc", max_size=10))

    assert cfg.log_name == "from-env"
    assert cfg.base_path == tmp_path
    assert cfg.level is Level.ERROR
    assert cfg.also_stdout is True
    assert cfg.max_size == 10


def test_resolve_config_ignores_empty_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGTOOL_NAME", "")
    assert resolve_config(LogConfig(log_name="svc")).log_name == "svc"


@pytest.mark.parametrize(
    ("var", "value"),
    [("LOGTOOL_LEVEL", "loud"), ("LOGTOOL_ALSO_STDOUT", "maybe"), ("LOGTOOL_NAME", "a/b")],
)
def test_resolve_config_invalid_env_raises(monkeypatch: pytest.MonkeyPatch, var: str, value: str) -> None:
    monkeypatch.setenv(var, value)
    with pytest.raises(ValueError, match="LOGTOOL_"):
        resolve_config()
