"""
String similarity primitives for approximate species matching.

Jaro-Winkler similarity and Levenshtein distance come from rapidfuzz; the
phonetic code is the primary double metaphone code of every word.
"""
from __future__ import annotations

from functools import lru_cache

from metaphone import doublemetaphone
from rapidfuzz.distance import JaroWinkler, Levenshtein

WINKLER_PREFIX_WEIGHT = 0.1


def jaro_winkler(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1]; identical strings score exactly 1.0."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return JaroWinkler.similarity(a, b, prefix_weight=WINKLER_PREFIX_WEIGHT)


def levenshtein(a: str, b: str) -> int:
    """Plain edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)


@lru_cache(maxsize=4096)
def phonetic_code(text: str) -> str:
    """Space-joined primary double metaphone codes of the words in ``text``."""
    codes = []
    for word in text.split():
        primary, _secondary = doublemetaphone(word)
        codes.append(primary)
    return " ".join(codes)


def phonetic_match(a: str, b: str) -> bool:
    """True when both phrases produce the same non-empty phonetic code."""
    code_a = phonetic_code(a)
    return bool(code_a.strip()) and code_a == phonetic_code(b)


def last_word(phrase: str) -> str:
    return phrase.rsplit(" ", 1)[-1]


def first_word(phrase: str) -> str:
    return phrase.split(" ", 1)[0]
