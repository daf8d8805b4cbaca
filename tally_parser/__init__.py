"""
Tally Parser Package for the Voice Tally application.

This package turns speech-recognition transcripts into bird tallies. A
transcript such as "aalscholver 2 bergeend 3 blauwe reiger 4" becomes the
ordered observations (aalscholver, 2), (bergeend, 3), (blauwe reiger, 4).

Main Components:
    parse_all / parse: Pure parsing entry points
    TallyParser: Session facade with matcher reuse and statistics
    SpeciesMatcher: Exact and approximate alias matching for 1-5 word phrases
    Segmenter: Numeral-delimited segmentation of the token stream
    MatchSettings: Thresholds and score bonuses for approximate matching
    build_alias_table / merge_alias_tables: Alias table construction

Design Philosophy:
    - Pure functions over text and an explicit alias table; no global state
    - Numerals are hard delimiters, the count belongs to the preceding words
    - Longer (more specific) phrases win over shorter ones
    - Unknown input yields fewer results, never an exception
"""

from __future__ import annotations

from .alias_table import build_alias_table, find_species_for_alias, merge_alias_tables
from .config import DEFAULT_SETTINGS, MatchSettings
from .parser import TallyParser, parse, parse_all
from .results import ParseResult
from .segmenter import Segment, Segmenter, segment_transcript
from .species_matcher import FuzzyCandidate, SpeciesMatcher, match_phrase
from .text_normalizer import normalize_text, singularize, tokenize

__all__ = [
    # Parsing entry points
    "parse_all",
    "parse",
    "TallyParser",
    "ParseResult",

    # Pipeline stages
    "Segment",
    "Segmenter",
    "segment_transcript",
    "SpeciesMatcher",
    "FuzzyCandidate",
    "match_phrase",
    "normalize_text",
    "tokenize",
    "singularize",

    # Alias tables and settings
    "build_alias_table",
    "merge_alias_tables",
    "find_species_for_alias",
    "MatchSettings",
    "DEFAULT_SETTINGS",
]

__version__ = "1.0.0"
