"""Application startup and configuration.

Console entry point: reads one final transcript per line (for instance piped
from a recognizer) and tallies it. Lines starting with ``~`` are treated as
partial transcripts.
"""
from __future__ import annotations

import sys
from typing import Iterable, List, Optional, TextIO

from loguru import logger

from app.application import Application
from config.service import ConfigurationServiceFactory
from core.exceptions import ConfigurationError
from logger import SessionLogger, setup_logging

PARTIAL_PREFIX = "~"


def run_application(
    argv: Optional[List[str]] = None,
    lines: Optional[Iterable[str]] = None,
    out: TextIO = sys.stdout,
) -> int:
    """Main application entry point.

    Orchestrates the startup sequence:
    1. Parse configuration from all sources (defaults, files, env, CLI)
    2. Configure console logging and the session log file
    3. Feed transcripts to the speech event handler
    4. Print the final tallies

    Returns:
        int: Process exit code
    """
    argv = sys.argv[1:] if argv is None else argv
    try:
        config_service, unknown_args = ConfigurationServiceFactory.create_from_args(argv)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config_service.log_level, config_service.debug)
    if unknown_args:
        logger.warning(f"Ignoring unknown arguments: {' '.join(unknown_args)}")

    session = SessionLogger(config_service.session_log_dir, auto_start=False)
    with Application(config_service, session_logger=session) as app:
        _connect_console(app, out)
        for line in (sys.stdin if lines is None else lines):
            feed_line(app, line)

        print(_format_tallies(app.tally_sheet.snapshot()), file=out)
    return 0


def feed_line(app: Application, line: str) -> None:
    text = line.rstrip("\n")
    if text.startswith(PARTIAL_PREFIX):
        app.handler.handle_partial_text(text[len(PARTIAL_PREFIX):])
    elif text.strip():
        app.handler.handle_final_text(text)


def _connect_console(app: Application, out: TextIO) -> None:
    def on_pending_addition(species: str, amount: int) -> None:
        print(f"{species} is not selected (heard +{amount})", file=out)

    def on_unrecognized(species: str, amount: int) -> None:
        print(f"{species} is not a known species", file=out)

    app.handler.set_callbacks(
        on_tallies_updated=lambda tallies: print(_format_tallies(tallies), file=out),
        on_pending_addition=on_pending_addition,
        on_unrecognized=on_unrecognized,
        on_no_result=lambda text: print(f"No species recognized in '{text}'", file=out),
        on_error=lambda message: print(f"Error: {message}", file=out),
    )


def _format_tallies(tallies) -> str:
    return ", ".join(f"{species}: {count}" for species, count in tallies.items()) or "(no species selected)"
