"""Logging setup for the voice tally application."""
from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .session_logger import SessionLogger

_console_sink_id: Optional[int] = None


def _not_session_only(record) -> bool:
    # Lines written through SessionLogger.log belong to the session file only
    return "session" not in record["extra"]


def setup_logging(log_level: str = "INFO", debug: bool = False) -> int:
    """Replace loguru's default handler with a stderr sink at ``log_level``.

    Calling it again replaces the previous console sink; file sinks such as
    the session log are left alone.

    Returns:
        int: The loguru sink id of the console handler
    """
    global _console_sink_id

    if _console_sink_id is None:
        # Drop loguru's default stderr handler (id 0) on first setup
        try:
            logger.remove(0)
        except ValueError:
            pass
    else:
        logger.remove(_console_sink_id)

    level = "DEBUG" if debug else log_level.upper()
    _console_sink_id = logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
        filter=_not_session_only,
    )
    return _console_sink_id


__all__ = ["SessionLogger", "setup_logging"]
