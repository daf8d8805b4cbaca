"""Tunable constants for phrase matching."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict


@dataclass(frozen=True)
class MatchSettings:
    """Thresholds and score adjustments used by the phrase matcher.

    The defaults are empirically tuned against field transcripts, not derived;
    they are exposed here so they can be recalibrated through configuration.

    Attributes:
        min_fuzzy_score: Acceptance threshold for multi-word phrases
        single_word_threshold: Acceptance threshold for single-word phrases
        single_word_max_edits: Edit distance allowing a single word below the threshold
        single_word_edit_floor: Minimum score for the edit-distance escape hatch
        last_word_bonus: Added when phrase and alias end on the same word
        longer_alias_bonus: Added when the alias is longer than the phrase
        prefix_bonus: Added when the alias starts with the phrase's first word
        phonetic_bonus: Added when both sides share a double metaphone code (0 disables)
        specificity_bonus: Tie-break nudge for longer aliases across phrase lengths
        max_phrase_words: Longest phrase considered before a numeral
    """
    min_fuzzy_score: float = 0.94
    single_word_threshold: float = 0.82
    single_word_max_edits: int = 2
    single_word_edit_floor: float = 0.80
    last_word_bonus: float = 0.02
    longer_alias_bonus: float = 0.01
    prefix_bonus: float = 0.01
    phonetic_bonus: float = 0.0
    specificity_bonus: float = 0.005
    max_phrase_words: int = 5

    @property
    def phonetic_enabled(self) -> bool:
        return self.phonetic_bonus > 0.0

    def with_min_fuzzy_score(self, score: float) -> "MatchSettings":
        if score == self.min_fuzzy_score:
            return self
        return replace(self, min_fuzzy_score=score)

    @classmethod
    def from_matching_config(cls, matching: Any) -> "MatchSettings":
        """Build settings from a ``config.config.MatchingConfig`` (or any object with the same fields)."""
        values = {f.name: getattr(matching, f.name) for f in fields(cls) if hasattr(matching, f.name)}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_SETTINGS = MatchSettings()
