"""
Species phrase matching for the voice tally parser.

This module resolves the words spoken in front of a count ("blauwe reiger" in
"blauwe reiger 4") to a canonical species name using an alias table. Speech
recognition output is noisy, so an exact lookup is backed by approximate
matching with adaptive acceptance thresholds.

Classes:
    FuzzyCandidate: Best approximate alias for one phrase together with its score
    SpeciesMatcher: Matches phrases of 1-5 words against an alias table

Matching Strategy:
    1. Phrase lengths are tried from the longest available down to one word,
       so "blauwe reiger" is preferred over the unigram "reiger"
    2. Exact lookup of the singular form, falling back to the phrase as
       spoken (aliases such as "boertjes"); an exact hit ends the search immediately
    3. Approximate match: Jaro-Winkler similarity plus small bonuses for a
       shared last word, a longer alias, a shared first word and (optionally)
       equal phonetic codes
    4. Multi-word phrases need a strict score; single words accept a looser
       score or a small edit distance, which absorbs common ASR slips
    5. The best accepted candidate over all lengths wins, longer aliases
       breaking ties
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from loguru import logger

from .config import DEFAULT_SETTINGS, MatchSettings
from .similarity import first_word, jaro_winkler, last_word, levenshtein, phonetic_match
from .text_normalizer import singularize_phrase


@dataclass(frozen=True)
class FuzzyCandidate:
    """Highest scoring alias for a phrase."""
    alias: str
    score: float


class SpeciesMatcher:
    """
    Resolve spoken phrases to canonical species names.

    The matcher treats the alias table as read-only and caches its answers per
    word sequence, so a new matcher must be built whenever the table changes
    (the parser facade does this when it is handed a different table).

    Usage:
        matcher = SpeciesMatcher({"blauwe reiger": "blauwe reiger", "reiger": "reiger"})
        matcher.match_phrase(["blauwe", "reiger"])  # -> "blauwe reiger"
    """

    def __init__(self, alias_table: Mapping[str, str], settings: Optional[MatchSettings] = None) -> None:
        """
        Args:
            alias_table: Lowercase alias -> canonical species mapping
            settings: Thresholds and score bonuses (defaults when omitted)
        """
        self.alias_table = alias_table
        self.settings = settings or DEFAULT_SETTINGS
        self._aliases: Tuple[str, ...] = tuple(alias_table.keys())
        self._match_cache: Dict[Tuple[str, ...], Optional[str]] = {}

    def match_phrase(self, words: Sequence[str]) -> Optional[str]:
        """
        Find the species named by the words in front of a numeral.

        Args:
            words: Up to ``max_phrase_words`` word tokens in spoken order

        Returns:
            Optional[str]: Canonical species, or None when nothing is close enough
        """
        words = tuple(word for word in words if word)
        if not words or not self._aliases:
            return None

        if words in self._match_cache:
            return self._match_cache[words]

        result = self._match_uncached(words)
        self._match_cache[words] = result
        return result

    def _match_uncached(self, words: Tuple[str, ...]) -> Optional[str]:
        best_species: Optional[str] = None
        best_alias: Optional[str] = None
        best_score = 0.0

        max_len = min(self.settings.max_phrase_words, len(words))
        for length in range(max_len, 0, -1):
            phrase = " ".join(words[-length:])
            norm = singularize_phrase(phrase)

            exact = self._exact_lookup(phrase, norm)
            if exact is not None:
                logger.debug(f"Exact alias match: '{phrase}' -> '{exact}'")
                return exact

            candidate = self.best_fuzzy_alias(norm)
            if candidate is None or not self._accepts(norm, candidate, length):
                continue

            combined = candidate.score
            if len(candidate.alias) > len(norm):
                combined += self.settings.specificity_bonus

            if combined > best_score or (
                combined == best_score
                and best_alias is not None
                and len(candidate.alias) > len(best_alias)
            ):
                best_score = combined
                best_alias = candidate.alias
                best_species = self.alias_table[candidate.alias]

        if best_species is not None:
            logger.debug(f"Fuzzy alias match: '{' '.join(words)}' -> '{best_alias}' "
                         f"(score: {best_score:.3f})")
        return best_species

    def _exact_lookup(self, phrase: str, norm: str) -> Optional[str]:
        species = self.alias_table.get(norm)
        if species is None and norm != phrase:
            species = self.alias_table.get(phrase)
        return species

    def best_fuzzy_alias(self, phrase: str) -> Optional[FuzzyCandidate]:
        """Highest adjusted-score alias for ``phrase``; ties go to the longer alias."""
        best: Optional[str] = None
        best_score = 0.0
        for alias in self._aliases:
            score = self.adjusted_score(phrase, alias)
            if score > best_score or (score == best_score and best is not None and len(alias) > len(best)):
                best = alias
                best_score = score
        if best is None:
            return None
        return FuzzyCandidate(best, best_score)

    def adjusted_score(self, phrase: str, alias: str) -> float:
        """Jaro-Winkler similarity with the heuristic bonuses, clamped to [0, 1]."""
        settings = self.settings
        score = jaro_winkler(phrase, alias)
        if last_word(phrase) == last_word(alias):
            score += settings.last_word_bonus
        if len(alias) > len(phrase):
            score += settings.longer_alias_bonus
        if alias.startswith(first_word(phrase)):
            score += settings.prefix_bonus
        if settings.phonetic_enabled and phonetic_match(phrase, alias):
            score += settings.phonetic_bonus
        return min(max(score, 0.0), 1.0)

    def _accepts(self, phrase: str, candidate: FuzzyCandidate, word_count: int) -> bool:
        settings = self.settings
        if word_count >= 2:
            return candidate.score >= settings.min_fuzzy_score
        if candidate.score >= settings.single_word_threshold:
            return True
        # Single-word ASR slips: allow a couple of edits at a slightly lower score
        return (candidate.score >= settings.single_word_edit_floor
                and levenshtein(phrase, candidate.alias) <= settings.single_word_max_edits)

    def clear_cache(self) -> None:
        self._match_cache.clear()

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'alias_count': len(self._aliases),
            'species_count': len(set(self.alias_table.values())),
            'cache_size': len(self._match_cache),
            'min_fuzzy_score': self.settings.min_fuzzy_score,
            'single_word_threshold': self.settings.single_word_threshold,
            'phonetic_enabled': self.settings.phonetic_enabled,
        }


def match_phrase(
    words: Sequence[str],
    alias_table: Mapping[str, str],
    settings: Optional[MatchSettings] = None,
) -> Optional[str]:
    """Functional form of :meth:`SpeciesMatcher.match_phrase` for one-off lookups."""
    return SpeciesMatcher(alias_table, settings).match_phrase(words)
