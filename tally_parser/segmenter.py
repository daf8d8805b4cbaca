"""Split a token stream into (species words, count) segments.

Every numeral is a delimiter: it closes the species phrase spoken in front of
it and supplies that phrase's count. Words left over after the last numeral
form one final segment with an implicit count of 1.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence

from .results import ParseResult
from .text_normalizer import is_number, parse_count


@dataclass(frozen=True)
class Segment:
    """Words preceding a delimiter (natural order) and the count they carry."""
    words: List[str] = field(default_factory=list)
    count: int = 1
    implicit: bool = False


class Segmenter:
    """Scan tokens left to right and yield one segment per delimiter."""

    def __init__(self, max_phrase_words: int = 5) -> None:
        self.max_phrase_words = max_phrase_words

    def segments(self, tokens: Sequence[str]) -> Iterator[Segment]:
        i = 0
        while i < len(tokens):
            num_idx = self.next_number_index(tokens, i)
            if num_idx == -1:
                words = self.words_before(tokens, len(tokens))
                if words:
                    yield Segment(words, 1, implicit=True)
                return

            # An empty word list is still yielded: the numeral simply finds no species
            yield Segment(self.words_before(tokens, num_idx), parse_count(tokens[num_idx]))
            i = num_idx + 1

    def words_before(self, tokens: Sequence[str], end_exclusive: int) -> List[str]:
        """Up to ``max_phrase_words`` words right before ``end_exclusive``, stopping at a numeral."""
        words: List[str] = []
        idx = end_exclusive - 1
        while idx >= 0 and len(words) < self.max_phrase_words:
            token = tokens[idx]
            if is_number(token):
                break
            words.append(token)
            idx -= 1
        words.reverse()
        return words

    @staticmethod
    def next_number_index(tokens: Sequence[str], start: int) -> int:
        for idx in range(start, len(tokens)):
            if is_number(tokens[idx]):
                return idx
        return -1


def segment_transcript(
    tokens: Sequence[str],
    match: Callable[[List[str]], Optional[str]],
    max_phrase_words: int = 5,
) -> List[ParseResult]:
    """
    Run ``match`` over every segment and collect the recognised tallies.

    Segments whose words do not resolve to a species are dropped silently;
    the numeral is treated as noise.

    Returns:
        List of ``ParseResult`` in spoken order
    """
    results: List[ParseResult] = []
    for segment in Segmenter(max_phrase_words).segments(tokens):
        if not segment.words:
            continue
        species = match(segment.words)
        if species is not None:
            results.append(ParseResult(species, segment.count))
    return results
