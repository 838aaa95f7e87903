from __future__ import annotations

import logging
import os
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# HTTP client internals log every request at INFO/DEBUG; a monitor polling every
# few seconds would drown its own output.
QUIET_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: str | None = None) -> str:
    """Explicit level, else $LOGLEVEL, else INFO."""
    return (level or os.environ.get("LOGLEVEL") or "INFO").upper()


def setup_logging(level: LogLevel | None = None) -> None:
    resolved = resolve_level(level)

    coloredlogs.install(
        level=resolved,
        fmt=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        field_styles={
            **coloredlogs.DEFAULT_FIELD_STYLES,
            "name": {"color": "cyan"},
        },
    )

    quiet_level = logging.DEBUG if resolved == "DEBUG" else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
