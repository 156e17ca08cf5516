"""Connection settings for a named database connection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from himorm import connection


@dataclass
class DBConfig:
    """Settings of one named connection."""

    connect: str
    username: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    database: str = ""
    charset: str = ""
    driver: str = ""
    prefix: str = ""
    max_idle: int = 0
    max_open: int = 0
    max_lifetime: int = 0
    log_mode: str = ""
    slow_threshold: int = 0
    colorful: bool = False

    def init(self) -> connection.Session:
        """Open and register the connection described by these settings."""
        return connection.init(self)


def db_config(connect: str, **settings: Any) -> DBConfig:
    """Create settings for the named connection."""
    return DBConfig(connect=connect, **settings)