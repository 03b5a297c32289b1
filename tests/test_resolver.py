"""Tests for natural-key lookup over previously projected records."""

import pytest

from lineage.projection.resolver import EntityResolver, find_file_by_lineage_id
from lineage.projection.templates import (
    build_event_template,
    build_person_template,
    build_relationship_template,
    build_source_template,
)
from lineage.session.model import Session, SessionMetadata
from lineage.store.base import VaultFile
from lineage.store.memory import MemoryVault


@pytest.fixture
def projected_store():
    return MemoryVault(
        {
            "Lineage/People/Jane Doe.md": build_person_template("Jane Doe", lineage_id="id-jane"),
            "Lineage/Events/Birth - Jane Doe.md": build_event_template(
                "birth", participants=["[[Jane Doe]]"]
            ),
            "Lineage/Events/Marriage - Jane Doe - 1888.md": build_event_template(
                "marriage",
                date="1888",
                place="[[Springfield]]",
                participants=["[[John Smith]]", "[[Jane Doe]]"],
            ),
            "Lineage/Relationships/Child of John Smith - Jane Doe.md": build_relationship_template(
                "parent-child", "[[John Smith]]", "[[Jane Doe]]"
            ),
            "Lineage/Sources/1900 Census.md": build_source_template(
                "1900 Census", record_type="census", repository="FamilySearch"
            ),
            "Lineage/Notes/Untyped.md": "# Untyped\n",
        }
    )


@pytest.fixture
def resolver(projected_store):
    session = Session(
        metadata=SessionMetadata(
            title="1900 Census",
            record_type="census",
            repository="FamilySearch",
            locator="ED 12",
            projected_entities=[
                "[[Jane Doe]]",
                "[[Birth - Jane Doe]]",
                "[[Marriage - Jane Doe - 1888]]",
                "[[Child of John Smith - Jane Doe]]",
                "[[1900 Census]]",
                "[[Untyped]]",
                "[[Deleted Record]]",
            ],
        ),
        id="3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b",
    )
    return EntityResolver.build(projected_store, session)


def test_build_skips_unresolved_and_untyped(resolver):
    assert len(resolver.entries) == 5
    assert "id-jane" in resolver.by_lineage_id


def test_find_person(resolver):
    assert resolver.find_person(" jane DOE ") == VaultFile("Lineage/People/Jane Doe.md")
    assert resolver.find_person("John Smith") is None


class TestFindEvent:
    def test_missing_date_does_not_rule_out(self, resolver):
        """A stored event without a date still matches a query with one."""
        assert resolver.find_event("birth", ["[[Jane Doe]]"], date="1900") == VaultFile(
            "Lineage/Events/Birth - Jane Doe.md"
        )

    def test_participant_order_does_not_matter(self, resolver):
        found = resolver.find_event(
            "marriage", ["[[Jane Doe]]", "[[John Smith|John]]"], place="[[Springfield]]"
        )
        assert found == VaultFile("Lineage/Events/Marriage - Jane Doe - 1888.md")

    def test_different_date_or_place(self, resolver):
        participants = ["[[John Smith]]", "[[Jane Doe]]"]
        assert resolver.find_event("marriage", participants, date="1889") is None
        assert resolver.find_event("marriage", participants, place="Chicago") is None

    def test_different_participants(self, resolver):
        assert resolver.find_event("birth", ["[[John Smith]]"]) is None


def test_find_relationship_is_directional(resolver):
    assert resolver.find_relationship(
        "parent-child", "[[John Smith]]", "[[Jane Doe]]"
    ) == VaultFile("Lineage/Relationships/Child of John Smith - Jane Doe.md")
    assert resolver.find_relationship("parent-child", "[[Jane Doe]]", "[[John Smith]]") is None
    assert resolver.find_relationship("spouse", "[[John Smith]]", "[[Jane Doe]]") is None


def test_find_source(resolver):
    expected = VaultFile("Lineage/Sources/1900 Census.md")
    assert resolver.find_source("1900 census") == expected
    assert resolver.find_source("1900 Census", record_type="Census", repository="familysearch") == expected
    assert resolver.find_source("1900 Census", record_type="probate") is None


def test_find_file_by_lineage_id(projected_store):
    assert find_file_by_lineage_id(projected_store, " id-jane ") == VaultFile(
        "Lineage/People/Jane Doe.md"
    )
    assert find_file_by_lineage_id(projected_store, "missing") is None
    assert find_file_by_lineage_id(projected_store, "  ") is None
