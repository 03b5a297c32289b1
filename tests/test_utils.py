"""Tests for identifiers, filenames and slugs."""

import uuid

from lineage.utils import ids
from lineage.utils.filename import (
    citation_filename,
    event_filename,
    extract_year,
    parent_child_filename,
    relationship_filename,
    sanitize_filename,
    title_case,
)
from lineage.utils.ids import (
    classify_id_format,
    generate_fallback_id,
    generate_lineage_id,
    generate_session_id,
    is_uuid,
)
from lineage.utils.slugify import slugify

# ------------------------------------------------------------------ #
#  Identifiers                                                        #
# ------------------------------------------------------------------ #


class TestIds:
    def test_session_id_is_uuid(self):
        assert classify_id_format(generate_session_id()) == "uuid"

    def test_lineage_ids_are_unique(self):
        assert generate_lineage_id() != generate_lineage_id()

    def test_fallback_id_format(self):
        value = generate_fallback_id()
        assert classify_id_format(value) == "fallback"
        assert not is_uuid(value)

    def test_blank_and_punctuated_ids_are_invalid(self):
        assert classify_id_format("") == "invalid"
        assert classify_id_format("   ") == "invalid"
        assert classify_id_format("bad id!") == "invalid"

    def test_uuid_with_whitespace(self):
        assert classify_id_format("  3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b ") == "uuid"

    def test_falls_back_without_randomness(self, monkeypatch):
        """Session ids fall back to the timestamp format when uuid4 is unavailable."""

        def no_randomness():
            raise NotImplementedError

        monkeypatch.setattr(ids.uuid, "uuid4", no_randomness)
        assert classify_id_format(generate_session_id()) == "fallback"

    def test_real_uuid4_round_trip(self):
        assert is_uuid(str(uuid.uuid4()))


# ------------------------------------------------------------------ #
#  Filenames                                                          #
# ------------------------------------------------------------------ #


class TestSanitizeFilename:
    def test_strips_unsafe_characters(self):
        assert sanitize_filename('Jane: "Doe"/Smith?') == "Jane DoeSmith"

    def test_collapses_whitespace(self):
        assert sanitize_filename("  Jane   Doe \t") == "Jane Doe"

    def test_empty_becomes_untitled(self):
        assert sanitize_filename("  ...  ") == "Untitled"
        assert sanitize_filename("") == "Untitled"

    def test_bounds_length(self):
        assert len(sanitize_filename("a" * 200)) == 120

    def test_keeps_commas_and_apostrophes(self):
        assert sanitize_filename("O'Connor, Springfield") == "O'Connor, Springfield"


def test_extract_year():
    """The first four-digit run is the year."""
    assert extract_year("abt. 1900-03-15") == "1900"
    assert extract_year("1888") == "1888"
    assert extract_year("unknown") is None
    assert extract_year(None) is None


def test_title_case():
    assert title_case("birth") == "Birth"
    assert title_case("parent-child") == "Parent-child"
    assert title_case("") == ""


class TestRecordFilenames:
    def test_event_with_year(self):
        assert event_filename("birth", "Bob Smith", "1900") == "Birth - Bob Smith - 1900"

    def test_event_without_year(self):
        assert event_filename("death", "Bob Smith") == "Death - Bob Smith"

    def test_relationship(self):
        assert (
            relationship_filename("Jane Doe", "John Smith")
            == "Relationship - Jane Doe & John Smith"
        )

    def test_parent_child(self):
        assert (
            parent_child_filename("John O'Connor", "Mary O'Connor")
            == "Child of John O'Connor - Mary O'Connor"
        )

    def test_citation(self):
        assert (
            citation_filename("1900 Census - Smith Household", "Jane Doe", "a1")
            == "Citation - 1900 Census - Smith Household - Jane Doe (a1)"
        )


def test_slugify():
    """Quotes are dropped and other punctuation collapses to a dash."""
    assert slugify("Mary's 1900 Census!") == "marys-1900-census"
    assert slugify("  Smith -- Household  ") == "smith-household"
    assert slugify("!!!") == "session"
