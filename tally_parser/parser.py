"""
Main Tally Parser for the Voice Tally application.

This module provides the public parsing entry points that turn a finalized
speech-recognition transcript into an ordered list of (species, count)
observations, using an alias table supplied by the caller.

Functions:
    parse_all: Pure function returning every observation in a transcript
    parse: First observation only

Classes:
    TallyParser: Facade that reuses matchers between calls and keeps statistics

Processing Pipeline:
    1. Normalization and tokenization (glued numerals split off)
    2. Segmentation on numerals, which act as delimiters and supply the count
    3. Phrase matching of the 1-5 words in front of every numeral
    4. Result assembly in spoken order

Error Handling:
    Parsing is total over string input. Unknown phrases, stray numerals and
    empty input simply produce fewer (or no) results; nothing is raised.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from core.error_handler import log_execution_time

from .config import DEFAULT_SETTINGS, MatchSettings
from .results import ParseResult
from .segmenter import segment_transcript
from .species_matcher import SpeciesMatcher
from .text_normalizer import tokenize


def _resolve_settings(settings: Optional[MatchSettings], min_fuzzy_score: Optional[float]) -> MatchSettings:
    settings = settings or DEFAULT_SETTINGS
    if min_fuzzy_score is not None:
        settings = settings.with_min_fuzzy_score(min_fuzzy_score)
    return settings


def parse_all(
    transcript: str,
    alias_to_species: Mapping[str, str],
    min_fuzzy_score: Optional[float] = None,
    settings: Optional[MatchSettings] = None,
) -> List[ParseResult]:
    """
    Parse every (species, count) pair from one transcript.

    Args:
        transcript: Free text from the recognizer
        alias_to_species: Lowercase alias -> canonical species
        min_fuzzy_score: Threshold for multi-word fuzzy matches; None keeps the
            settings value (0.94 by default). An explicit value replaces that
            threshold outright, so scores below 0.94 loosen matching too
        settings: Remaining matching constants

    Returns:
        List[ParseResult]: Observations in spoken order; empty when nothing matched
    """
    if not isinstance(transcript, str) or not transcript.strip() or not alias_to_species:
        return []

    settings = _resolve_settings(settings, min_fuzzy_score)
    matcher = SpeciesMatcher(alias_to_species, settings)
    return segment_transcript(tokenize(transcript), matcher.match_phrase, settings.max_phrase_words)


def parse(
    transcript: str,
    alias_to_species: Mapping[str, str],
    min_fuzzy_score: Optional[float] = None,
    settings: Optional[MatchSettings] = None,
) -> Optional[ParseResult]:
    """First observation of :func:`parse_all`, or None."""
    results = parse_all(transcript, alias_to_species, min_fuzzy_score, settings)
    return results[0] if results else None


class TallyParser:
    """
    Stateful facade over :func:`parse_all` for a listening session.

    A matcher (with its phrase cache) is kept for the most recent alias table
    and reused as long as the caller passes the same mapping object. Alias
    tables are treated as read-only: hand over a new mapping when the species
    selection changes instead of mutating the old one.

    Usage:
        parser = TallyParser()
        results = parser.parse_all("aalscholver 2 bergeend 3", alias_table)
    """

    def __init__(self, settings: Optional[MatchSettings] = None) -> None:
        """
        Args:
            settings: Matching constants (defaults when omitted)
        """
        self.settings = settings or DEFAULT_SETTINGS
        self._alias_table: Optional[Mapping[str, str]] = None
        self._matcher: Optional[SpeciesMatcher] = None

        self.stats = self._empty_stats()

        logger.info("TallyParser initialized "
                    f"(min_fuzzy_score={self.settings.min_fuzzy_score}, "
                    f"phonetic={'on' if self.settings.phonetic_enabled else 'off'})")

    @log_execution_time()
    def parse_all(
        self,
        transcript: str,
        alias_to_species: Mapping[str, str],
        min_fuzzy_score: Optional[float] = None,
    ) -> List[ParseResult]:
        """
        Parse a transcript, updating statistics and logging the outcome.

        Args:
            transcript: Final transcript from the recognizer
            alias_to_species: Alias table for the current selection
            min_fuzzy_score: Optional override of the multi-word threshold

        Returns:
            List[ParseResult]: Observations in spoken order
        """
        self.stats['total_parses'] += 1

        if not isinstance(transcript, str) or not transcript.strip():
            logger.debug("Empty transcript provided")
            self.stats['empty_inputs'] += 1
            return []

        if not alias_to_species:
            logger.warning("Alias table is empty; nothing can be matched")
            self.stats['empty_inputs'] += 1
            return []

        tokens = tokenize(transcript)
        logger.debug(f"Parsing with {len(alias_to_species)} aliases: {tokens}")

        matcher = self._matcher_for(alias_to_species, _resolve_settings(self.settings, min_fuzzy_score))
        results = segment_transcript(tokens, matcher.match_phrase, matcher.settings.max_phrase_words)

        if results:
            self.stats['successful_parses'] += 1
            self.stats['observations'] += len(results)
            logger.debug(f"Parse result: {[r.as_pair() for r in results]}")
        else:
            self.stats['failed_parses'] += 1
            logger.debug(f"No species found in: '{transcript}'")

        return results

    def parse(
        self,
        transcript: str,
        alias_to_species: Mapping[str, str],
        min_fuzzy_score: Optional[float] = None,
    ) -> Optional[ParseResult]:
        results = self.parse_all(transcript, alias_to_species, min_fuzzy_score)
        return results[0] if results else None

    def _matcher_for(self, alias_table: Mapping[str, str], settings: MatchSettings) -> SpeciesMatcher:
        if (
            self._matcher is None
            or alias_table is not self._alias_table
            or settings != self._matcher.settings
        ):
            self._alias_table = alias_table
            self._matcher = SpeciesMatcher(alias_table, settings)
        return self._matcher

    def get_parsing_stats(self) -> Dict[str, Any]:
        """
        Get parsing statistics.

        Returns:
            Dict: Counters plus success rate and matcher information
        """
        stats = self.stats.copy()
        total = stats['total_parses']
        stats['success_rate'] = stats['successful_parses'] / total if total else 0.0
        if self._matcher is not None:
            stats['matcher'] = self._matcher.get_statistics()
        return stats

    def reset_stats(self) -> None:
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'total_parses': 0,
            'successful_parses': 0,
            'failed_parses': 0,
            'empty_inputs': 0,
            'observations': 0,
        }
