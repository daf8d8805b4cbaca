"""Application wiring for a voice tally session."""
from __future__ import annotations

import sys
from typing import Dict, Optional, Tuple

from loguru import logger

from app.parsing_buffer import DisambiguationBuffer
from app.speech_event_handler import SpeechEventHandler
from app.speech_log import SpeechLog
from app.tally_sheet import TallySheet
from app.use_cases import (
    ApplyTallyUpdatesUseCase,
    ConfirmPendingAdditionUseCase,
    ParseTranscriptUseCase,
)
from config.service import ConfigurationService
from logger.session_logger import SessionLogger
from tally_parser.alias_table import merge_alias_tables
from tally_parser.parser import TallyParser


class Application:
    """Owns the objects of one tallying session and their lifecycle.

    Transcripts are parsed against the aliases of the selected species merged
    with those of every known species, so unselected species are still
    recognized and can be offered for addition.

    Attributes:
        config: Configuration service
        session: Session log file (None when file logging is disabled)
        tally_sheet: Counters for the selected species
        speech_log: In-memory log shown to the user
        handler: Entry point for recognizer events
    """

    def __init__(
        self,
        config: ConfigurationService,
        session_logger: Optional[SessionLogger] = None,
    ):
        self.config = config
        self.session = session_logger

        self.parser = TallyParser(config.match_settings)
        self.tally_sheet = TallySheet(config.selected_species)
        self.speech_log = SpeechLog(config.max_log_entries)

        self._full_table = config.alias_table()
        self._table_cache: Tuple[frozenset, Dict[str, str]] = (frozenset(), {})

        self.handler = SpeechEventHandler(
            parse_use_case=ParseTranscriptUseCase(self.parser),
            apply_use_case=ApplyTallyUpdatesUseCase(self.tally_sheet),
            confirm_use_case=ConfirmPendingAdditionUseCase(self.tally_sheet),
            alias_table_provider=self.alias_table,
            known_species_provider=lambda: self.config.known_species,
            buffer=DisambiguationBuffer(),
            speech_log=self.speech_log,
            suppress_duplicate_finals=config.suppress_duplicate_finals,
        )

    def alias_table(self) -> Dict[str, str]:
        """Alias table for the current selection, rebuilt when the selection changes."""
        selection = self.tally_sheet.selected
        cached_selection, cached_table = self._table_cache
        if selection != cached_selection or not cached_table:
            active = self.config.alias_table(sorted(selection))
            cached_table = merge_alias_tables(active, self._full_table)
            self._table_cache = (selection, cached_table)
            logger.debug(f"Alias table rebuilt: {len(cached_table)} aliases for {len(selection)} selected species")
        return cached_table

    def log_session_info(self) -> None:
        if self.session is None:
            return
        self.session.log_kv(
            "APP",
            {
                "python": sys.version.split(" ")[0],
                "selected": sorted(self.tally_sheet.selected),
            },
        )
        self.session.log_kv("CONFIG", self.config.to_dict())

    def start(self) -> None:
        self.handler.start_session()
        self.log_session_info()

    def close(self) -> None:
        """Write the final tallies to the session log and end it."""
        if self.session is None:
            return
        self.session.log_kv("TALLIES", self.tally_sheet.snapshot())
        self.session.log_end()

    def __enter__(self) -> "Application":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
