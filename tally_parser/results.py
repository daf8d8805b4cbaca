"""Value objects returned by the parser."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ParseResult:
    """
    One tally observation extracted from a transcript.

    Attributes:
        species: Canonical (lowercase) species name
        count: Number of birds, always at least 1
    """
    species: str
    count: int = 1

    def as_pair(self) -> Tuple[str, int]:
        return self.species, self.count

    def to_dict(self) -> Dict[str, Any]:
        return {'species': self.species, 'count': self.count}
