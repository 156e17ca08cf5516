"""Log levels for database statement logging."""

from __future__ import annotations

from enum import IntEnum


class LogLevel(IntEnum):
    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4

    @property
    def code(self) -> int:
        return int(self)

    @property
    def level(self) -> str:
        return self.name.capitalize()


_BY_NAME = {member.level: member for member in LogLevel}


def log_level(level: str) -> LogLevel:
    """Look up a log level by its name, such as ``"Info"``."""
    try:
        return _BY_NAME[level]
    except KeyError:
        raise ValueError(f"{level} log level undefined") from None