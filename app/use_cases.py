"""Use cases for voice tally business logic.

Implements the use case layer between the session handler and the parser /
tally sheet. Use cases never raise: failures come back as ``Failure`` values
carrying a domain error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from app.tally_sheet import TallySheet
from core.exceptions import ParsingError, TallyError
from core.result import Success, Failure, Result
from tally_parser.alias_table import normalize_species
from tally_parser.parser import TallyParser
from tally_parser.results import ParseResult


@dataclass
class TallyOutcome:
    """How a batch of parse results was applied to the tally sheet.

    Attributes:
        counted: (species, amount) pairs added to selected species
        pending_additions: Known species outside the selection; the caller
            asks the user whether to add them
        unrecognized: Species names that are not known at all
        timestamp: When the batch was applied
    """
    counted: List[Tuple[str, int]] = field(default_factory=list)
    pending_additions: List[Tuple[str, int]] = field(default_factory=list)
    unrecognized: List[Tuple[str, int]] = field(default_factory=list)
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()

    @property
    def has_updates(self) -> bool:
        return bool(self.counted)

    @property
    def is_empty(self) -> bool:
        return not (self.counted or self.pending_additions or self.unrecognized)


class ParseTranscriptUseCase:
    """Turn a final transcript into parse results."""

    def __init__(self, tally_parser: TallyParser):
        self.tally_parser = tally_parser

    def execute(
        self,
        transcript: str,
        alias_table: Mapping[str, str],
    ) -> Result[List[ParseResult], ParsingError]:
        """
        Args:
            transcript: Final transcript from the recognizer
            alias_table: Alias -> canonical species table for this session

        Returns:
            Result containing the parse results (possibly empty) or ParsingError
        """
        if not isinstance(transcript, str):
            return Failure(ParsingError(f"Transcript must be text, got {type(transcript).__name__}"))
        try:
            results = self.tally_parser.parse_all(transcript, alias_table)
        except Exception as e:
            logger.error(f"Failed to parse transcript '{transcript}': {e}")
            return Failure(ParsingError(f"Failed to parse: {e}"))

        for r in results:
            logger.info(f"[parsed] species={r.species} count={r.count}")
        return Success(results)


class ApplyTallyUpdatesUseCase:
    """Apply parse results to the tally sheet, splitting off unselected species."""

    def __init__(self, tally_sheet: TallySheet):
        self.tally_sheet = tally_sheet

    def execute(
        self,
        results: Iterable[ParseResult],
        known_species: Iterable[str] = (),
    ) -> Result[TallyOutcome, TallyError]:
        """
        Args:
            results: Parse results in spoken order
            known_species: Every species the application knows about

        Returns:
            Result containing the TallyOutcome or TallyError
        """
        try:
            known = {normalize_species(s) for s in known_species}
            outcome = TallyOutcome()

            for r in results:
                species = normalize_species(r.species)
                if self.tally_sheet.is_selected(species):
                    outcome.counted.append((species, r.count))
                elif species in known:
                    outcome.pending_additions.append((species, r.count))
                else:
                    outcome.unrecognized.append((species, r.count))

            if outcome.counted:
                self.tally_sheet.update_tallies(outcome.counted)
                logger.info("[tally] " + ", ".join(f"{s} +{n}" for s, n in outcome.counted))
            for species, amount in outcome.pending_additions:
                logger.info(f"[tally] {species} (+{amount}) is not selected")
            for species, amount in outcome.unrecognized:
                logger.warning(f"[tally] {species} (+{amount}) is not a known species")

            return Success(outcome)
        except Exception as e:
            logger.error(f"Failed to apply tally updates: {e}")
            return Failure(TallyError(f"Failed to update tallies: {e}"))


class ConfirmPendingAdditionUseCase:
    """Add a species the user confirmed to the selection, including its count."""

    def __init__(self, tally_sheet: TallySheet):
        self.tally_sheet = tally_sheet

    def execute(self, species: str, amount: int) -> Result[int, TallyError]:
        """
        Returns:
            Result with the species' new count, or TallyError
        """
        if not species or not species.strip():
            return Failure(TallyError("Species name is empty"))
        if amount < 0:
            return Failure(TallyError(f"Amount must not be negative: {amount}"))
        try:
            added = self.tally_sheet.add_species_to_selection(species, amount)
            count = self.tally_sheet.count(species)
            logger.info(f"[tally] {normalize_species(species)} +{amount} "
                        f"({'added to selection' if added else 'already selected'})")
            return Success(count)
        except Exception as e:
            logger.error(f"Failed to add species '{species}': {e}")
            return Failure(TallyError(f"Failed to add species: {e}"))
