"""Unit tests for SpeechEventHandler."""
import pytest
from unittest.mock import Mock

from app.parsing_buffer import DisambiguationBuffer
from app.speech_event_handler import SpeechEventHandler
from app.speech_log import LogType, SpeechLog
from app.tally_sheet import TallySheet
from app.use_cases import (
    ApplyTallyUpdatesUseCase,
    ConfirmPendingAdditionUseCase,
    ParseTranscriptUseCase,
)
from core.result import Failure
from core.exceptions import ParsingError
from tally_parser import TallyParser

ALIASES = {
    "bergeend": "bergeend",
    "barent": "bergeend",
    "kievit": "kievit",
    "aalscholver": "aalscholver",
    "dodo": "dodo",
}
KNOWN = ["bergeend", "kievit", "aalscholver"]


@pytest.fixture
def sheet():
    return TallySheet(["bergeend", "kievit"])


@pytest.fixture
def handler(sheet):
    return SpeechEventHandler(
        parse_use_case=ParseTranscriptUseCase(TallyParser()),
        apply_use_case=ApplyTallyUpdatesUseCase(sheet),
        confirm_use_case=ConfirmPendingAdditionUseCase(sheet),
        alias_table_provider=lambda: ALIASES,
        known_species_provider=lambda: KNOWN,
        buffer=DisambiguationBuffer(),
        speech_log=SpeechLog(),
    )


def texts(handler, log_type):
    return [e.text for e in handler.speech_log.entries(log_type)]


class TestFinalText:
    def test_counts_selected_species(self, handler, sheet):
        # Arrange
        on_tallies = Mock()
        handler.set_callbacks(on_tallies_updated=on_tallies)

        # Act
        outcome = handler.handle_final_text("Barent 4 kievit 2")

        # Assert
        assert outcome.counted == [("bergeend", 4), ("kievit", 2)]
        assert sheet.snapshot() == {"bergeend": 4, "kievit": 2}
        on_tallies.assert_called_once_with({"bergeend": 4, "kievit": 2})
        assert texts(handler, LogType.FINAL) == ["Final: barent 4 kievit 2"]
        assert texts(handler, LogType.PARSED_BLOCK) == ["  Found: bergeend → 4", "  Found: kievit → 2"]
        assert texts(handler, LogType.TALLY_UPDATE) == ["Bergeend ➜ +4", "Kievit ➜ +2"]

    def test_duplicate_final_is_not_parsed(self, handler, sheet):
        # Arrange
        on_duplicate = Mock()
        handler.set_callbacks(on_duplicate_final=on_duplicate)
        handler.handle_final_text("bergeend 3")

        # Act
        outcome = handler.handle_final_text("Bergeend 3 ")

        # Assert
        assert outcome is None
        assert sheet.count("bergeend") == 3
        assert texts(handler, LogType.WARNING) == ["Final duplicate ignored"]
        on_duplicate.assert_called_once_with("bergeend 3")

    def test_duplicates_allowed_when_suppression_is_off(self, handler, sheet):
        # Arrange
        handler.suppress_duplicate_finals = False

        # Act
        handler.handle_final_text("bergeend 3")
        handler.handle_final_text("bergeend 3")

        # Assert
        assert sheet.count("bergeend") == 6
        assert handler.buffer.peek_final() == "bergeend 3"

    def test_empty_result_is_logged_as_error(self, handler):
        # Arrange
        on_no_result = Mock()
        handler.set_callbacks(on_no_result=on_no_result)

        # Act
        outcome = handler.handle_final_text("xyznotaspecies 3")

        # Assert
        assert outcome is None
        assert texts(handler, LogType.ERROR) == ["No parse result"]
        on_no_result.assert_called_once_with("xyznotaspecies 3")

    def test_unselected_species_is_offered(self, handler, sheet):
        # Arrange
        on_pending = Mock()
        handler.set_callbacks(on_pending_addition=on_pending)

        # Act
        outcome = handler.handle_final_text("aalscholver 5")

        # Assert
        assert outcome.pending_additions == [("aalscholver", 5)]
        assert not sheet.is_selected("aalscholver")
        on_pending.assert_called_once_with("aalscholver", 5)
        assert texts(handler, LogType.WARNING) == ["Aalscholver is not selected"]

    def test_unknown_species_is_reported(self, handler):
        # Arrange
        on_unrecognized = Mock()
        on_tallies = Mock()
        handler.set_callbacks(on_unrecognized=on_unrecognized, on_tallies_updated=on_tallies)

        # Act
        handler.handle_final_text("dodo 1")

        # Assert
        on_unrecognized.assert_called_once_with("dodo", 1)
        on_tallies.assert_not_called()
        assert texts(handler, LogType.ERROR) == ["Dodo not recognized"]

    def test_blank_final_is_ignored(self, handler):
        # Arrange
        handler.handle_partial_text("berg")

        # Act
        outcome = handler.handle_final_text("   ")

        # Assert
        assert outcome is None
        assert handler.buffer.peek_partial() is None
        assert texts(handler, LogType.FINAL) == []

    def test_parse_failure_goes_to_on_error(self, sheet):
        # Arrange
        parse_use_case = Mock()
        parse_use_case.execute.return_value = Failure(ParsingError("Failed to parse: boom"))
        on_error = Mock()
        handler = SpeechEventHandler(
            parse_use_case=parse_use_case,
            apply_use_case=ApplyTallyUpdatesUseCase(sheet),
            confirm_use_case=ConfirmPendingAdditionUseCase(sheet),
            alias_table_provider=lambda: ALIASES,
        )
        handler.set_callbacks(on_error=on_error)

        # Act
        outcome = handler.handle_final_text("bergeend 3")

        # Assert
        assert outcome is None
        on_error.assert_called_once_with("Failed to parse: boom")
        assert texts(handler, LogType.ERROR) == ["Error: Failed to parse: boom"]

    def test_unexpected_exception_is_contained(self, handler):
        # Arrange
        handler.alias_table_provider = Mock(side_effect=RuntimeError("table gone"))

        # Act
        outcome = handler.handle_final_text("bergeend 3")

        # Assert
        assert outcome is None

    def test_failing_callback_does_not_break_tallying(self, handler, sheet):
        # Arrange
        handler.set_callbacks(on_tallies_updated=Mock(side_effect=RuntimeError("ui closed")))

        # Act
        outcome = handler.handle_final_text("kievit 2")

        # Assert
        assert outcome.counted == [("kievit", 2)]
        assert sheet.count("kievit") == 2


class TestPartialText:
    def test_partial_is_buffered_and_shown(self, handler):
        # Arrange
        on_partial = Mock()
        handler.set_callbacks(on_partial_update=on_partial)

        # Act
        handler.handle_partial_text(" Berg ")

        # Assert
        assert handler.buffer.peek_partial() == "Berg"
        on_partial.assert_called_once_with("Berg")
        assert texts(handler, LogType.PARTIAL) == ["  Partial: berg"]
        assert handler.speech_log.export_text() == ""

    def test_blank_partial_clears_buffer(self, handler):
        # Arrange
        on_partial = Mock()
        handler.set_callbacks(on_partial_update=on_partial)
        handler.handle_partial_text("berg")

        # Act
        handler.handle_partial_text("  ")

        # Assert
        assert handler.buffer.peek_partial() is None
        on_partial.assert_called_once()


class TestSession:
    def test_start_session_forgets_previous_final(self, handler, sheet):
        # Arrange
        handler.handle_final_text("bergeend 3")

        # Act
        handler.start_session()
        handler.handle_final_text("bergeend 3")

        # Assert
        assert sheet.count("bergeend") == 6

    def test_confirm_pending_addition(self, handler, sheet):
        # Arrange
        on_tallies = Mock()
        handler.set_callbacks(on_tallies_updated=on_tallies)

        # Act
        added = handler.confirm_pending_addition("aalscholver", 5)

        # Assert
        assert added is True
        assert sheet.count("aalscholver") == 5
        on_tallies.assert_called_once_with({"aalscholver": 5, "bergeend": 0, "kievit": 0})
        assert texts(handler, LogType.TALLY_UPDATE) == ["Aalscholver ➜ +5"]

    def test_confirm_pending_addition_failure(self, handler):
        # Arrange
        on_error = Mock()
        handler.set_callbacks(on_error=on_error)

        # Act
        added = handler.confirm_pending_addition("", 5)

        # Assert
        assert added is False
        on_error.assert_called_once_with("Species name is empty")


class TestCallbacks:
    def test_is_configured(self, handler):
        # Assert
        assert not handler.is_configured()

        # Act
        handler.set_callbacks(on_error=Mock(), on_tallies_updated=Mock())

        # Assert
        assert handler.is_configured()

    def test_set_callbacks_keeps_existing(self, handler):
        # Arrange
        on_error = Mock()
        handler.set_callbacks(on_error=on_error)

        # Act
        handler.set_callbacks(on_partial_update=Mock())

        # Assert
        assert handler.on_error is on_error

    def test_clear_callbacks(self, handler):
        # Arrange
        handler.set_callbacks(on_error=Mock(), on_tallies_updated=Mock())

        # Act
        handler.clear_callbacks()

        # Assert
        assert handler.on_error is None
        assert handler.on_tallies_updated is None
        assert not handler.is_configured()
