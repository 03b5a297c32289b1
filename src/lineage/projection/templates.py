"""Initial content of newly created entity records.

Header fields whose value is ``None`` are left out. Each record gets a
fresh ``lineage_id`` unless one is passed in.
"""

from typing import Any

from lineage.store.frontmatter import render_record
from lineage.utils.ids import generate_lineage_id


def _build(frontmatter: dict[str, Any], body: str) -> str:
    compact = {key: value for key, value in frontmatter.items() if value is not None}
    return render_record(compact, body).rstrip() + "\n"


def build_person_template(
    name: str, sex: str | None = None, lineage_id: str | None = None
) -> str:
    """Person record with empty event, relationship and citation sections."""
    return _build(
        {
            "lineage_type": "person",
            "lineage_id": lineage_id or generate_lineage_id(),
            "name": name,
            "sex": sex,
        },
        "## Events\n\n## Relationships\n\n## Citations\n",
    )


def build_place_template(
    name: str, parent_place: str | None = None, lineage_id: str | None = None
) -> str:
    """Place record; ``parent_place`` is the enclosing place name, if known."""
    return _build(
        {
            "lineage_type": "place",
            "lineage_id": lineage_id or generate_lineage_id(),
            "name": name,
            "parent_place": parent_place,
        },
        "## Events\n",
    )


def build_event_template(
    event_type: str,
    date: str | None = None,
    place: str | None = None,
    participants: list[str] | None = None,
    lineage_id: str | None = None,
) -> str:
    """Event record.

    Args:
        event_type: Assertion type the event comes from, e.g. ``birth``.
        date: Date as written in the session.
        place: Place link.
        participants: Person links, principal first.
        lineage_id: Existing id to keep; a new one is generated otherwise.

    Returns:
        Markdown text with a YAML header.
    """
    return _build(
        {
            "lineage_type": "event",
            "lineage_id": lineage_id or generate_lineage_id(),
            "event_type": event_type,
            "date": date,
            "place": place,
            "participants": list(participants) if participants else None,
        },
        "## Participants\n\n## Citations\n",
    )


def build_relationship_template(
    relationship_type: str,
    person_a: str,
    person_b: str,
    person_a_role: str | None = None,
    person_b_role: str | None = None,
    date: str | None = None,
    place: str | None = None,
    lineage_id: str | None = None,
) -> str:
    """Directional relationship record between ``person_a`` and ``person_b``."""
    return _build(
        {
            "lineage_type": "relationship",
            "lineage_id": lineage_id or generate_lineage_id(),
            "relationship_type": relationship_type,
            "person_a": person_a,
            "person_b": person_b,
            "person_a_role": person_a_role,
            "person_b_role": person_b_role,
            "date": date,
            "place": place,
        },
        "## Events\n\n## Citations\n",
    )


def build_source_template(
    title: str,
    record_type: str | None = None,
    repository: str | None = None,
    locator: str | None = None,
    date: str | None = None,
    lineage_id: str | None = None,
) -> str:
    """Source record for the document a session was researched from."""
    return _build(
        {
            "lineage_type": "source",
            "lineage_id": lineage_id or generate_lineage_id(),
            "title": title,
            "record_type": record_type,
            "repository": repository,
            "locator": locator,
            "date": date,
        },
        "## Citations\n",
    )


def build_citation_template(
    source_id: str,
    target_entity_id: str,
    target_entity_type: str,
    assertion_id: str,
    snippet: str | None = None,
    locator: str | None = None,
    lineage_id: str | None = None,
) -> str:
    """Citation record linking a source to one projected target.

    The snippet is repeated in the body under ``## Snippet``.
    """
    return _build(
        {
            "lineage_type": "citation",
            "lineage_id": lineage_id or generate_lineage_id(),
            "source_id": source_id,
            "target_entity_id": target_entity_id,
            "target_entity_type": target_entity_type,
            "assertion_id": assertion_id,
            "snippet": snippet,
            "locator": locator,
        },
        f"## Snippet\n\n{snippet or ''}\n",
    )
