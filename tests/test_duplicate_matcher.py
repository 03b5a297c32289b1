"""Tests for fuzzy person matching."""

from datetime import date

import pytest

from lineage.index.vault_indexer import VaultIndexer
from lineage.matching.duplicate_matcher import (
    MatchCandidate,
    MatchFeatures,
    compute_composite_score,
    normalize_name,
    parse_date_range,
    rank_candidates,
    score_date_overlap,
    score_name,
    soundex,
    suggest_person_matches,
)
from lineage.projection.templates import build_person_template
from lineage.session.model import Person
from lineage.store.memory import MemoryVault


class TestNormalizeName:
    def test_folds_case_and_accents(self):
        assert normalize_name("  Müller ") == "muller"

    def test_drops_apostrophes(self):
        assert normalize_name("O'Brien") == "obrien"

    def test_mc_prefix(self):
        assert normalize_name("McDonald") == "macdonald"

    def test_sen_suffix(self):
        assert normalize_name("Andersen") == "anderson"

    def test_punctuation_becomes_space(self):
        assert normalize_name("Smith-Jones") == "smith jones"


class TestSoundex:
    def test_standard_codes(self):
        assert soundex("robert") == "R163"
        assert soundex("rupert") == "R163"

    def test_padded(self):
        assert soundex("lee") == "L000"

    def test_no_letters(self):
        assert soundex("") == ""
        assert soundex("123") == ""


class TestScoreName:
    def test_identical_after_normalizing(self):
        assert score_name("Jane Doe", "  jane DOE") == 1.0

    def test_blank_scores_zero(self):
        assert score_name("", "Jane") == 0.0
        assert score_name("Jane", None) == 0.0

    def test_soundex_floor(self):
        """Names that sound alike score at least 0.8."""
        assert score_name("Robert", "Rupert") == pytest.approx(0.8)

    def test_unrelated_names_score_low(self):
        assert score_name("Jon Smith", "Xavier Quinn") < 0.4

    def test_mac_and_mc_spellings(self):
        assert score_name("MacDonald", "McDonald") > 0.9

    @pytest.mark.parametrize(
        "name_a, name_b",
        [
            ("Robert", "Rupert"),
            ("Jon Smith", "John Smyth"),
            ("Katharina Müller", "Catherine Mueller"),
            ("Jane", ""),
        ],
    )
    def test_symmetric(self, name_a, name_b):
        assert score_name(name_a, name_b) == score_name(name_b, name_a)


class TestDateRanges:
    def test_year(self):
        assert parse_date_range("1900") == (date(1900, 1, 1), date(1900, 12, 31))

    def test_month_respects_month_length(self):
        assert parse_date_range("1900-02") == (date(1900, 2, 1), date(1900, 2, 28))

    def test_approximate_day(self):
        assert parse_date_range("~1900-03-15") == (date(1900, 2, 13), date(1900, 4, 14))

    def test_unparseable(self):
        assert parse_date_range("1900-13-01") is None
        assert parse_date_range("circa 1900") is None
        assert parse_date_range(None) is None

    def test_overlap_scores(self):
        assert score_date_overlap("1900", "1900") == 1.0
        assert score_date_overlap("1900", "1901") == 0.0
        assert score_date_overlap("1900-06", "1900") == pytest.approx(30 / 365)

    def test_missing_date_is_neutral(self):
        assert score_date_overlap("1900", None) == 0.5
        assert score_date_overlap("someday", "1900") == 0.5

    def test_approximate_year_overlaps_exact_day(self):
        """``~1900`` partly covers ``1900-06-15``; disjoint years do not."""
        approximate = score_date_overlap("~1900", "1900-06-15")
        assert 0.0 < approximate < 1.0
        assert approximate > score_date_overlap("1890", "1900-06-15")


class TestCompositeScore:
    def test_empty_features(self):
        """Only the neutral date contributes when nothing else is known."""
        assert compute_composite_score(MatchFeatures()) == pytest.approx(0.125)

    def test_all_features(self):
        features = MatchFeatures(name=1.0, date=1.0, place=1.0, relationship=1.0)
        assert compute_composite_score(features) == pytest.approx(1.0)

    def test_exact_name_neutral_date(self):
        features = MatchFeatures(name=1.0, date=0.5, place=0.0, relationship=0.0)
        assert compute_composite_score(features) == pytest.approx(0.525)

    def test_nan_counts_as_missing(self):
        assert compute_composite_score(MatchFeatures(name=float("nan"))) == pytest.approx(0.125)

    def test_clamps_out_of_range(self):
        assert compute_composite_score(MatchFeatures(name=5.0, date=1.0)) == pytest.approx(0.65)


def test_rank_candidates_orders_filters_and_limits():
    """Candidates come back best first, filtered by min score and limited."""
    candidates = [
        MatchCandidate("weak", MatchFeatures(name=0.1)),
        MatchCandidate("good", MatchFeatures(name=1.0, date=1.0)),
        MatchCandidate("best", MatchFeatures(name=1.0, date=1.0, place=1.0)),
        MatchCandidate("ok", MatchFeatures(name=1.0)),
    ]

    ranked = rank_candidates(candidates, min_score=0.5, limit=2)

    assert [c.id for c in ranked] == ["best", "good"]
    assert ranked[0].score == pytest.approx(0.9)
    assert all(c.score is None for c in candidates)


def test_suggest_person_matches_from_index():
    """Indexed person records are scored against the session person's name."""
    store = MemoryVault(
        {
            "People/Robert Smith.md": build_person_template("Robert Smith"),
            "People/Rupert Smith.md": build_person_template("Rupert Smith"),
            "People/Alice Jones.md": build_person_template("Alice Jones"),
        }
    )
    indexer = VaultIndexer(store)
    indexer.rebuild()

    suggestions = suggest_person_matches(Person(id="p1", name="Robert Smith"), indexer)

    assert [s.id for s in suggestions] == ["People/Robert Smith.md"]
    assert suggestions[0].data == "Robert Smith"
    assert suggestions[0].score == pytest.approx(0.525)


def test_suggest_person_matches_needs_a_name():
    indexer = VaultIndexer(MemoryVault())
    assert suggest_person_matches(Person(id="p1"), indexer) == []
