"""Tests for exact and approximate species phrase matching."""
import pytest

from tally_parser import species_matcher
from tally_parser.config import MatchSettings
from tally_parser.species_matcher import FuzzyCandidate, SpeciesMatcher, match_phrase

NO_BONUS = MatchSettings(last_word_bonus=0.0, longer_alias_bonus=0.0, prefix_bonus=0.0)


@pytest.fixture
def table():
    return {
        "reiger": "reiger",
        "blauwe reiger": "blauwe reiger",
        "bergeend": "bergeend",
        "barent": "bergeend",
        "grauwe gans": "grauwe gans",
    }


@pytest.fixture
def flat_similarity(monkeypatch):
    """Make every raw similarity 0.5 so only the bonuses differ."""
    monkeypatch.setattr(species_matcher, "jaro_winkler", lambda a, b: 0.5)


class TestMatchPhrase:
    def test_exact_phrase(self, table):
        matcher = SpeciesMatcher(table)
        assert matcher.match_phrase(["blauwe", "reiger"]) == "blauwe reiger"

    def test_exact_singular(self, table):
        assert SpeciesMatcher(table).match_phrase(["grauwe", "ganzen"]) == "grauwe gans"

    def test_singular_alias_wins_over_spoken_form(self):
        table = {"boertjes": "boerenzwaluw", "boertje": "kleine boerenzwaluw"}
        assert SpeciesMatcher(table).match_phrase(["boertjes"]) == "kleine boerenzwaluw"

    def test_spoken_form_used_when_singular_is_unknown(self):
        table = {"boertjes": "boerenzwaluw"}
        assert SpeciesMatcher(table).match_phrase(["boertjes"]) == "boerenzwaluw"

    def test_longest_exact_phrase_wins(self, table):
        assert SpeciesMatcher(table).match_phrase(["een", "blauwe", "reiger"]) == "blauwe reiger"

    def test_only_trailing_words_are_considered(self, table):
        # "bergeend" is not at the end, so it cannot be selected
        assert SpeciesMatcher(table).match_phrase(["bergeend", "xyzqq"]) is None

    def test_empty_words(self, table):
        assert SpeciesMatcher(table).match_phrase([]) is None
        assert SpeciesMatcher(table).match_phrase(["", ""]) is None

    def test_empty_table(self):
        assert SpeciesMatcher({}).match_phrase(["bergeend"]) is None

    def test_fuzzy_single_word(self, table):
        assert SpeciesMatcher(table).match_phrase(["bergeent"]) == "bergeend"

    def test_phrase_length_is_capped(self, table):
        matcher = SpeciesMatcher(table, MatchSettings(max_phrase_words=1))
        # Only "reiger" is looked at
        assert matcher.match_phrase(["blauwe", "reiger"]) == "reiger"

    def test_results_are_cached(self, table):
        matcher = SpeciesMatcher(table)
        matcher.match_phrase(["bergeent"])
        matcher.match_phrase(["bergeent"])
        assert matcher.get_statistics()["cache_size"] == 1

        matcher.clear_cache()
        assert matcher.get_statistics()["cache_size"] == 0

    def test_functional_form(self, table):
        assert match_phrase(["barent"], table) == "bergeend"


class TestAdjustedScore:
    def test_identical_strings_are_clamped_to_one(self, table):
        assert SpeciesMatcher(table).adjusted_score("blauwe reiger", "blauwe reiger") == 1.0

    def test_last_word_bonus(self, table, flat_similarity):
        matcher = SpeciesMatcher(table, MatchSettings(longer_alias_bonus=0.0, prefix_bonus=0.0))
        assert matcher.adjusted_score("kleine reiger", "blauwe reiger") == pytest.approx(0.52)

    def test_longer_alias_bonus(self, table, flat_similarity):
        matcher = SpeciesMatcher(table, MatchSettings(last_word_bonus=0.0, prefix_bonus=0.0))
        assert matcher.adjusted_score("gans", "grauwe gans") == pytest.approx(0.51)
        assert matcher.adjusted_score("grauwe gans", "gans") == pytest.approx(0.5)

    def test_prefix_bonus(self, table, flat_similarity):
        matcher = SpeciesMatcher(table, MatchSettings(last_word_bonus=0.0, longer_alias_bonus=0.0))
        assert matcher.adjusted_score("blauwe regen", "blauwe reiger") == pytest.approx(0.51)

    def test_phonetic_bonus_only_when_enabled(self, table, flat_similarity, monkeypatch):
        monkeypatch.setattr(species_matcher, "phonetic_match", lambda a, b: True)

        assert SpeciesMatcher(table, NO_BONUS).adjusted_score("x", "y") == pytest.approx(0.5)

        with_phonetics = MatchSettings(last_word_bonus=0.0, longer_alias_bonus=0.0,
                                       prefix_bonus=0.0, phonetic_bonus=0.05)
        assert SpeciesMatcher(table, with_phonetics).adjusted_score("x", "y") == pytest.approx(0.55)


class TestAcceptance:
    @pytest.mark.parametrize("score,accepted", [(0.93, False), (0.94, True), (0.99, True)])
    def test_multi_word_threshold(self, table, score, accepted):
        matcher = SpeciesMatcher(table)
        candidate = FuzzyCandidate("blauwe reiger", score)
        assert matcher._accepts("blauwe reigr", candidate, 2) is accepted

    def test_single_word_threshold(self, table):
        matcher = SpeciesMatcher(table)
        assert matcher._accepts("xxxxxxxx", FuzzyCandidate("bergeend", 0.82), 1)
        assert not matcher._accepts("xxxxxxxx", FuzzyCandidate("bergeend", 0.81), 1)

    def test_single_word_edit_distance_escape(self, table):
        matcher = SpeciesMatcher(table)
        assert matcher._accepts("mergeent", FuzzyCandidate("bergeend", 0.81), 1)
        assert not matcher._accepts("mergeent", FuzzyCandidate("bergeend", 0.79), 1)

    def test_multi_word_has_no_edit_distance_escape(self, table):
        matcher = SpeciesMatcher(table)
        assert not matcher._accepts("blauwe reigr", FuzzyCandidate("blauwe reiger", 0.90), 2)

    def test_custom_min_fuzzy_score(self, table):
        matcher = SpeciesMatcher(table, MatchSettings(min_fuzzy_score=0.85))
        assert matcher._accepts("blauwe reigr", FuzzyCandidate("blauwe reiger", 0.90), 2)


class TestBestFuzzyAlias:
    def test_ties_prefer_longer_alias(self, table, flat_similarity):
        candidate = SpeciesMatcher(table, NO_BONUS).best_fuzzy_alias("xyz")
        assert candidate == FuzzyCandidate("blauwe reiger", 0.5)

    def test_no_alias_scores(self, monkeypatch, table):
        monkeypatch.setattr(species_matcher, "jaro_winkler", lambda a, b: 0.0)
        assert SpeciesMatcher(table, NO_BONUS).best_fuzzy_alias("xyz") is None


def test_statistics(table):
    stats = SpeciesMatcher(table).get_statistics()
    assert stats["alias_count"] == 5
    assert stats["species_count"] == 4
    assert stats["phonetic_enabled"] is False
