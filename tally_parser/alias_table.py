"""Build the alias -> canonical species tables handed to the parser."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from loguru import logger

from .text_normalizer import normalize_text


def normalize_species(name: str) -> str:
    return name.strip().lower()


def build_alias_table(
    species_aliases: Mapping[str, Iterable[str]],
    species: Optional[Iterable[str]] = None,
) -> Dict[str, str]:
    """
    Flatten per-species alias lists into a lookup table.

    Args:
        species_aliases: Canonical species -> spoken variants
        species: Restrict the table to these species (all species when None)

    Returns:
        Dict mapping normalized alias -> canonical species. Every species is
        its own alias; empty variants are dropped.
    """
    wanted = None if species is None else {normalize_species(s) for s in species}
    table: Dict[str, str] = {}

    for name, aliases in species_aliases.items():
        canonical = normalize_species(name)
        if not canonical or (wanted is not None and canonical not in wanted):
            continue
        for alias in (name, *aliases):
            key = normalize_text(alias)
            if key:
                table[key] = canonical

    if wanted is not None:
        # Selected species without alias data still match on their own name
        for canonical in wanted:
            key = normalize_text(canonical)
            if key:
                table.setdefault(key, canonical)

    logger.debug(f"Alias table built ({len(table)} aliases)")
    return table


def merge_alias_tables(active: Mapping[str, str], fallback: Mapping[str, str]) -> Dict[str, str]:
    """Union of both tables; aliases of the active selection win on conflicts."""
    merged = dict(fallback)
    merged.update(active)
    return merged


def find_species_for_alias(
    alias: str,
    active: Mapping[str, str],
    fallback: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Look an alias up in the active table first, then in the fallback table."""
    key = normalize_text(alias)
    species = active.get(key)
    if species is None and fallback is not None:
        species = fallback.get(key)
    return species
