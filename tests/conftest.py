"""Shared fixtures: in-memory vault, config and session note builders."""

import pytest

from lineage.config import Config
from lineage.session.parser import parse_session
from lineage.store.frontmatter import dump_yaml
from lineage.store.memory import MemoryVault

SESSION_ID = "3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b"


def build_session_text(
    persons=None,
    assertions=None,
    citations=None,
    title="1900 Census - Smith Household",
    record_type="census",
    repository="FamilySearch",
    locator="ED 12, sheet 4, line 12",
    document=None,
    session_id=SESSION_ID,
    projected_entities=None,
    notes="Household found on the first pass.",
):
    header = {
        "lineage_type": "research_session",
        "title": title,
        "record_type": record_type,
        "repository": repository,
        "locator": locator,
        "session_date": "2024-01-05",
        "projected_entities": list(projected_entities or []),
    }
    block = {
        "session": {
            "id": session_id,
            "document": (
                document
                if document is not None
                else {
                    "url": "https://www.familysearch.org/ark:/61903/1:1:MM6X",
                    "files": [],
                    "transcription": "",
                }
            ),
        },
        "sources": [],
        "persons": list(persons or []),
        "assertions": list(assertions or []),
        "citations": list(citations or []),
    }
    return (
        f"---\n{dump_yaml(header)}---\n\n"
        f"{notes}\n\n"
        f"```lineage-session\n{dump_yaml(block)}```\n"
    )


@pytest.fixture
def store():
    return MemoryVault()


@pytest.fixture
def config():
    return Config(vault_root="vault", base_folder="Lineage")


@pytest.fixture
def session_text():
    """Factory for session note text."""
    return build_session_text


@pytest.fixture
def make_session():
    """Factory for parsed sessions."""

    def _make(**kwargs):
        return parse_session(build_session_text(**kwargs))

    return _make


@pytest.fixture
def census_session(make_session):
    """Smith household: identity, birth, marriage, parent-child and residence."""
    return make_session(
        persons=[
            {"id": "p1", "name": "Jane Doe", "sex": "F"},
            {"id": "p2", "name": "John Smith", "sex": "M"},
            {"id": "p3", "name": "Bob Smith", "sex": "M"},
        ],
        assertions=[
            {
                "id": "a1",
                "type": "identity",
                "participants": [{"person_ref": "p1"}],
                "name": "Jane Doe",
                "citations": ["c1"],
            },
            {
                "id": "a2",
                "type": "birth",
                "participants": [{"person_ref": "p3", "principal": True}],
                "date": "1900-03-15",
                "place": "Springfield, Illinois",
                "citations": ["c2"],
            },
            {
                "id": "a3",
                "type": "marriage",
                "participants": [{"person_ref": "p1"}, {"person_ref": "p2"}],
                "date": "1888",
            },
            {"id": "a4", "type": "parent-child", "parent_ref": "p2", "child_ref": "p3"},
            {
                "id": "a5",
                "type": "residence",
                "participants": [{"person_ref": "p2"}],
                "place": "Springfield, Illinois",
                "date": "1900",
            },
        ],
        citations=[
            {"id": "c1", "snippet": "Jane Doe, wife, age 32", "locator": "line 12"},
            {"id": "c2", "snippet": "Bob Smith, son, born Mar 1900", "locator": "line 14"},
        ],
    )
