"""Per-species counters for the active tallying session."""
from __future__ import annotations

from threading import Lock
from typing import Dict, FrozenSet, Iterable, Tuple

from tally_parser.alias_table import normalize_species


class TallySheet:
    """
    Counters for the selected species.

    Species names are normalized (trimmed, lowercase) on every call. Counts
    never drop below zero. All mutations are serialized with a lock.
    """

    def __init__(self, species: Iterable[str] = ()) -> None:
        self._lock = Lock()
        self._counts: Dict[str, int] = {}
        self._selected: FrozenSet[str] = frozenset()
        self.set_selection(species)

    @property
    def selected(self) -> FrozenSet[str]:
        return self._selected

    def is_selected(self, species: str) -> bool:
        return normalize_species(species) in self._selected

    def set_selection(self, species: Iterable[str]) -> None:
        """Replace the selection; counts of species that stay selected are kept."""
        selection = frozenset(normalize_species(s) for s in species if s and s.strip())
        with self._lock:
            self._counts = {name: self._counts.get(name, 0) for name in selection}
            self._selected = selection

    def add_species_to_selection(self, species: str, amount: int = 0) -> bool:
        """
        Select ``species`` (if needed) and add ``amount`` to its counter.

        Returns:
            bool: True if the species was newly selected
        """
        key = normalize_species(species)
        with self._lock:
            added = key not in self._selected
            if added:
                self._selected = self._selected | {key}
            self._counts[key] = max(0, self._counts.get(key, 0) + amount)
            return added

    def update_tallies(self, updates: Iterable[Tuple[str, int]]) -> None:
        """Apply a batch of (species, amount) increments in one step."""
        with self._lock:
            for species, amount in updates:
                key = normalize_species(species)
                self._counts[key] = max(0, self._counts.get(key, 0) + amount)

    def increment(self, species: str) -> int:
        return self._bump(species, +1)

    def decrement(self, species: str) -> int:
        return self._bump(species, -1)

    def _bump(self, species: str, delta: int) -> int:
        key = normalize_species(species)
        with self._lock:
            value = max(0, self._counts.get(key, 0) + delta)
            self._counts[key] = value
            return value

    def reset(self, species: str) -> None:
        key = normalize_species(species)
        with self._lock:
            if key in self._counts:
                self._counts[key] = 0

    def reset_all(self) -> None:
        with self._lock:
            self._counts = {name: 0 for name in self._counts}

    def count(self, species: str) -> int:
        return self._counts.get(normalize_species(species), 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of the counters, sorted by species name."""
        with self._lock:
            return dict(sorted(self._counts.items()))

    def total(self) -> int:
        return sum(self._counts.values())
