"""Transcript normalization, tokenization and naive singularization."""
from __future__ import annotations

import re
from typing import Iterable, List

# Letters accepted in species names: ASCII plus the Latin-1 range à..ÿ
_LETTERS = "a-zà-ÿ"

_INVALID_CHARS = re.compile(rf"[^{_LETTERS}0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN_SEPARATORS = re.compile(r"[ -]")
_GLUED_NUMBER = re.compile(rf"^([{_LETTERS}]+)(\d+)$")

MAX_COUNT = 2 ** 31 - 1


def normalize_text(raw: str) -> str:
    """Lowercase, replace unsupported characters with spaces and collapse whitespace."""
    if not raw:
        return ""
    text = _INVALID_CHARS.sub(" ", raw.lower())
    return _WHITESPACE.sub(" ", text).strip()


def split_embedded_numbers(tokens: Iterable[str]) -> List[str]:
    """Split tokens where ASR glued a number onto a word ("bergeend4" -> "bergeend", "4")."""
    out: List[str] = []
    for token in tokens:
        match = _GLUED_NUMBER.match(token)
        if match:
            out.extend(match.groups())
        else:
            out.append(token)
    return out


def tokenize(raw: str) -> List[str]:
    """
    Turn a raw transcript into word and numeral tokens.

    Args:
        raw: Transcript text as delivered by the recognizer

    Returns:
        Lowercase tokens; hyphens act as separators and glued numerals are split off
    """
    text = normalize_text(raw)
    if not text:
        return []
    parts = [part for part in _TOKEN_SEPARATORS.split(text) if part]
    return split_embedded_numbers(parts)


def is_number(token: str) -> bool:
    """True for non-empty, all-digit tokens."""
    return bool(token) and token.isdigit()


def parse_count(token: str) -> int:
    """Numeric value of a count token; zero, garbage and overflow all count as 1."""
    try:
        value = int(token)
    except (TypeError, ValueError):
        return 1
    if value <= 0 or value > MAX_COUNT:
        return 1
    return value


def singularize(word: str) -> str:
    """Naive Dutch singular form ("reigers" -> "reiger", "ganzen" -> "gans")."""
    if len(word) <= 3:
        return word
    if word.endswith("en"):
        if word.endswith("zen"):
            return word[:-3] + "s"
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def singularize_phrase(phrase: str) -> str:
    return " ".join(singularize(word) for word in phrase.split())
