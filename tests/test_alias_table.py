from tally_parser.alias_table import (
    build_alias_table,
    find_species_for_alias,
    merge_alias_tables,
    normalize_species,
)

SPECIES = {
    "Aalscholver": ["alsgolver"],
    "bergeend": ["Barent!", "  "],
    "blauwe reiger": ["blauwe regen"],
}


def test_normalize_species():
    assert normalize_species("  Blauwe Reiger ") == "blauwe reiger"


def test_canonical_name_is_its_own_alias():
    table = build_alias_table(SPECIES)
    assert table["aalscholver"] == "aalscholver"
    assert table["blauwe reiger"] == "blauwe reiger"


def test_aliases_are_normalized_and_empty_ones_dropped():
    table = build_alias_table(SPECIES)
    assert table["barent"] == "bergeend"
    assert "" not in table
    assert len(table) == 6


def test_restrict_to_selection():
    table = build_alias_table(SPECIES, ["bergeend"])
    assert set(table) == {"bergeend", "barent"}


def test_selected_species_without_aliases_still_match():
    table = build_alias_table(SPECIES, ["kievit"])
    assert table == {"kievit": "kievit"}


def test_empty_selection_gives_empty_table():
    assert build_alias_table(SPECIES, []) == {}


def test_merge_prefers_active_selection():
    active = {"reiger": "blauwe reiger"}
    fallback = {"reiger": "grote zilverreiger", "bergeend": "bergeend"}
    merged = merge_alias_tables(active, fallback)
    assert merged == {"reiger": "blauwe reiger", "bergeend": "bergeend"}
    assert fallback["reiger"] == "grote zilverreiger"


def test_find_species_for_alias():
    active = {"barent": "bergeend"}
    fallback = {"kieviet": "kievit"}
    assert find_species_for_alias("Barent", active, fallback) == "bergeend"
    assert find_species_for_alias("kieviet", active, fallback) == "kievit"
    assert find_species_for_alias("kieviet", active) is None
    assert find_species_for_alias("onbekend", active, fallback) is None
