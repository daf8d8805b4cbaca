"""
Speech Event Handler for the Voice Tally application.

This module contains the SpeechEventHandler class, the mediator between the
speech recognizer callbacks and the tallying business logic.

Classes:
    SpeechEventHandler: Routes partial/final transcripts through the buffer,
        the parser and the tally sheet, and reports back through callbacks

Architecture:
    - Recognizer adapters call handle_partial_text / handle_final_text
    - Business logic is delegated to use cases
    - Presentation is notified through optional callbacks
    - Every step is mirrored into the session's SpeechLog
"""
from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional

from loguru import logger

from app.parsing_buffer import DisambiguationBuffer
from app.speech_log import LogEntry, LogType, SpeechLog
from app.use_cases import (
    ApplyTallyUpdatesUseCase,
    ConfirmPendingAdditionUseCase,
    ParseTranscriptUseCase,
    TallyOutcome,
)
from core.error_handler import ErrorHandler, handle_exceptions

AliasTableProvider = Callable[[], Mapping[str, str]]
SpeciesProvider = Callable[[], Iterable[str]]


class SpeechEventHandler:
    """
    Handle recognizer events for one listening session.

    Key Responsibilities:
        - Keep the live partial transcript for display
        - Drop repeated final transcripts before they are parsed twice
        - Parse final transcripts against the current alias table
        - Count selected species, surface unselected and unknown ones
        - Record every step in the speech log

    Attributes:
        buffer: Partial/final transcript buffer
        speech_log: Session log shown to the user and exported
        on_*: Callback functions for the presentation layer
    """

    def __init__(
        self,
        parse_use_case: ParseTranscriptUseCase,
        apply_use_case: ApplyTallyUpdatesUseCase,
        confirm_use_case: ConfirmPendingAdditionUseCase,
        alias_table_provider: AliasTableProvider,
        known_species_provider: Optional[SpeciesProvider] = None,
        buffer: Optional[DisambiguationBuffer] = None,
        speech_log: Optional[SpeechLog] = None,
        suppress_duplicate_finals: bool = True,
    ) -> None:
        """
        Args:
            parse_use_case: Transcript -> parse results
            apply_use_case: Parse results -> tally sheet
            confirm_use_case: Adds a confirmed species to the selection
            alias_table_provider: Returns the alias table to parse against
            known_species_provider: Returns every known species (selection-independent)
            buffer: Transcript buffer (a new one when omitted)
            speech_log: Session log (a new one when omitted)
            suppress_duplicate_finals: Ignore a final equal to the previous final
        """
        self.parse_transcript = parse_use_case
        self.apply_updates = apply_use_case
        self.confirm_addition = confirm_use_case
        self.alias_table_provider = alias_table_provider
        self.known_species_provider = known_species_provider or (lambda: ())
        self.buffer = buffer or DisambiguationBuffer()
        self.speech_log = speech_log or SpeechLog()
        self.suppress_duplicate_finals = suppress_duplicate_finals
        self.error_handler = ErrorHandler()

        self.on_partial_update: Optional[Callable] = None
        self.on_tallies_updated: Optional[Callable] = None
        self.on_pending_addition: Optional[Callable] = None
        self.on_unrecognized: Optional[Callable] = None
        self.on_no_result: Optional[Callable] = None
        self.on_duplicate_final: Optional[Callable] = None
        self.on_error: Optional[Callable] = None

    def start_session(self) -> None:
        """Forget transcripts of a previous session."""
        self.buffer.reset()
        self.speech_log.add(LogEntry("Session started", LogType.INFO))
        logger.info("Listening session started")

    def handle_partial_text(self, text: str) -> None:
        """Store and display a live (non-final) transcript fragment."""
        self.buffer.update_partial(text)
        partial = self.buffer.peek_partial()
        if partial is None:
            return

        logger.debug(f"[partial] {partial}")
        self.speech_log.add(LogEntry(f"  Partial: {partial.lower()}", LogType.PARTIAL, include_in_export=False))
        self._notify("on_partial_update", partial)

    @handle_exceptions(message="Error handling final text")
    def handle_final_text(self, text: str) -> Optional[TallyOutcome]:
        """
        Parse a final transcript and update the tallies.

        Args:
            text: Final transcript from the recognizer

        Returns:
            Optional[TallyOutcome]: What was counted, or None when the final
            was empty, a duplicate, unparseable or failed

        Workflow:
            1. Duplicate check against the previously accepted final
            2. Parse against the current alias table
            3. Apply results to the tally sheet
            4. Notify the presentation layer
        """
        if not text or not text.strip():
            self.buffer.update_partial(None)
            return None

        normalized = text.lower().strip()

        if self.suppress_duplicate_finals:
            if not self.buffer.should_process_final(normalized):
                logger.info(f"Duplicate final ignored: '{normalized}'")
                self.speech_log.add(LogEntry("Final duplicate ignored", LogType.WARNING))
                self._notify("on_duplicate_final", normalized)
                return None
        else:
            self.buffer.push_final(normalized)

        logger.info(f"Processing final text: '{normalized}'")
        self.speech_log.add(LogEntry(f"Final: {normalized}", LogType.FINAL))

        parsed = self.parse_transcript.execute(normalized, self.alias_table_provider())
        if parsed.is_failure():
            self._report_error(parsed.error_message or "Failed to parse transcript")
            return None

        results = parsed.unwrap()
        if not results:
            self.speech_log.add(LogEntry("No parse result", LogType.ERROR))
            self._notify("on_no_result", normalized)
            return None

        for r in results:
            self.speech_log.add(LogEntry(f"  Found: {r.species} → {r.count}", LogType.PARSED_BLOCK))

        applied = self.apply_updates.execute(results, self.known_species_provider())
        if applied.is_failure():
            self._report_error(applied.error_message or "Failed to update tallies")
            return None

        outcome = applied.unwrap()
        self._report_outcome(outcome)
        return outcome

    def confirm_pending_addition(self, species: str, amount: int) -> bool:
        """Add a species the user agreed to add, counting ``amount`` for it."""
        result = self.confirm_addition.execute(species, amount)
        if result.is_failure():
            self._report_error(result.error_message or "Failed to add species")
            return False

        self.speech_log.add(LogEntry(f"{species.strip().capitalize()} ➜ +{amount}", LogType.TALLY_UPDATE))
        self._notify("on_tallies_updated", self.apply_updates.tally_sheet.snapshot())
        return True

    def _report_outcome(self, outcome: TallyOutcome) -> None:
        for species, amount in outcome.counted:
            self.speech_log.add(LogEntry(f"{species.capitalize()} ➜ +{amount}", LogType.TALLY_UPDATE))
        for species, amount in outcome.pending_additions:
            self.speech_log.add(LogEntry(f"{species.capitalize()} is not selected", LogType.WARNING))
            self._notify("on_pending_addition", species, amount)
        for species, amount in outcome.unrecognized:
            self.speech_log.add(LogEntry(f"{species.capitalize()} not recognized", LogType.ERROR))
            self._notify("on_unrecognized", species, amount)

        if outcome.counted:
            self._notify("on_tallies_updated", self.apply_updates.tally_sheet.snapshot())

    def _report_error(self, message: str) -> None:
        logger.warning(message)
        self.speech_log.add(LogEntry(f"Error: {message}", LogType.ERROR))
        self._notify("on_error", message)

    def _notify(self, name: str, *args) -> None:
        """Invoke a presentation callback; its failures are logged, not propagated."""
        callback = getattr(self, name)
        if callback is not None:
            self.error_handler.safe_execute(callback, *args, context=name)

    def set_callbacks(
        self,
        on_partial_update: Optional[Callable] = None,
        on_tallies_updated: Optional[Callable] = None,
        on_pending_addition: Optional[Callable] = None,
        on_unrecognized: Optional[Callable] = None,
        on_no_result: Optional[Callable] = None,
        on_duplicate_final: Optional[Callable] = None,
        on_error: Optional[Callable] = None,
    ) -> None:
        """Set several callbacks at once; None leaves an existing callback untouched."""
        if on_partial_update is not None:
            self.on_partial_update = on_partial_update
        if on_tallies_updated is not None:
            self.on_tallies_updated = on_tallies_updated
        if on_pending_addition is not None:
            self.on_pending_addition = on_pending_addition
        if on_unrecognized is not None:
            self.on_unrecognized = on_unrecognized
        if on_no_result is not None:
            self.on_no_result = on_no_result
        if on_duplicate_final is not None:
            self.on_duplicate_final = on_duplicate_final
        if on_error is not None:
            self.on_error = on_error

    def clear_callbacks(self) -> None:
        self.on_partial_update = None
        self.on_tallies_updated = None
        self.on_pending_addition = None
        self.on_unrecognized = None
        self.on_no_result = None
        self.on_duplicate_final = None
        self.on_error = None

    def is_configured(self) -> bool:
        """True when the callbacks needed for basic feedback are set."""
        return self.on_error is not None and self.on_tallies_updated is not None
