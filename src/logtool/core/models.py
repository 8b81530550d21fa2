"""Core data models for leveled file logging."""

from __future__ import annotations

from enum import IntEnum


class Level(IntEnum):
    """Severity levels, ordered from least to most severe.

    DEFAULT is reserved for standard-library adapters: records at this level
    carry an optional embedded marker that selects the real level. ACTION is
    the structured-event level; its payload is already a serialized record.
    """

    DEFAULT = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    ACTION = 5

    @property
    def file_name(self) -> str:
        """Lowercase token used in log file names."""
        return _FILE_NAMES[self]

    @property
    def is_filterable(self) -> bool:
        """Whether a threshold may be set to this level."""
        return Level.DEBUG <= self <= Level.ERROR

    @classmethod
    def parse(cls, name: str) -> Level:
        """Parse a configured level name (e.g. "info", "WARN")."""
        key = name.strip().lower()
        for level, token in _FILE_NAMES.items():
            if level is not cls.DEFAULT and token == key:
                return level
        valid = ", ".join(t for lv, t in _FILE_NAMES.items() if lv is not cls.DEFAULT)
        raise ValueError(f"Invalid log level '{name}'. Valid values: {valid}")


_FILE_NAMES: dict[Level, str] = {
    Level.DEFAULT: "output",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warn",
    Level.ERROR: "error",
    Level.ACTION: "action",
}
