"""Parse session note text into a ``Session`` and serialize it back.

A session note looks like::

    ---
    lineage_type: research_session
    title: 1900 Census - Smith Household
    ...
    ---

    free-form notes

    ```lineage-session
    session:
      id: ...
    persons: [...]
    ```

``serialize_session`` is the inverse of ``parse_session`` for every typed
field, and re-emits the notes between the header and the block.
"""

import logging
import re
from typing import Any

import yaml

from lineage.errors import FormatError, SchemaError, YamlError
from lineage.session.model import (
    RECORD_TYPES,
    SESSION_LINEAGE_TYPE,
    Assertion,
    Citation,
    Participant,
    Person,
    Session,
    SessionDocument,
    SessionMetadata,
    Source,
)
from lineage.store.frontmatter import dump_yaml, load_yaml

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---", re.DOTALL)
SESSION_BLOCK_RE = re.compile(r"```lineage-session[ \t]*\r?\n(.*?)\r?\n```", re.DOTALL)
SESSION_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

METADATA_KEYS = (
    "lineage_type",
    "title",
    "record_type",
    "repository",
    "locator",
    "session_date",
    "projected_entities",
)


def parse_session(text: str) -> Session:
    """Parse a full session note.

    Raises:
        FormatError: The header or the ``lineage-session`` block is missing.
        YamlError: Either block is not well-formed YAML.
        SchemaError: A value has the wrong type, enum value or shape.
    """
    header_match = HEADER_RE.match(text)
    if header_match is None:
        raise FormatError("No YAML frontmatter found")

    block_match = SESSION_BLOCK_RE.search(text)
    if block_match is None:
        raise FormatError("No lineage-session code block found")

    header = _load(header_match.group(1), "frontmatter")
    block = _load(block_match.group(1), "lineage-session")

    notes = ""
    if block_match.start() > header_match.end():
        notes = text[header_match.end() : block_match.start()].strip()

    metadata = _parse_metadata(header)
    session = _parse_block(block, metadata)
    session.notes = notes
    return session


def serialize_session(session: Session) -> str:
    """Render a ``Session`` as session note text."""
    header = dump_yaml(_metadata_to_dict(session.metadata)).rstrip("\n")
    block = dump_yaml(_block_to_dict(session)).rstrip("\n")
    notes = session.notes.strip()

    parts = [f"---\n{header}\n---\n"]
    if notes:
        parts.append(f"{notes}\n")
    parts.append(f"```lineage-session\n{block}\n```\n")
    return "\n".join(parts)


# ------------------------------------------------------------------ #
#  Parsing                                                            #
# ------------------------------------------------------------------ #


def _load(source: str, label: str) -> Any:
    try:
        return load_yaml(source)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
        line = mark.line if mark is not None else 0
        raise YamlError(
            f"YAML parsing failed at line {line}: {exc}", label=label, line=line
        ) from exc


def _parse_metadata(value: Any) -> SessionMetadata:
    data = _record(value, "frontmatter")

    lineage_type = data.get("lineage_type")
    if lineage_type != SESSION_LINEAGE_TYPE:
        raise SchemaError(
            f"Expected lineage_type to be {SESSION_LINEAGE_TYPE}, got {lineage_type}",
            "lineage_type",
        )

    record_type = data.get("record_type")
    if not isinstance(record_type, str) or record_type not in RECORD_TYPES:
        raise SchemaError(
            f"Invalid record_type: {record_type}. Allowed: {', '.join(RECORD_TYPES)}",
            "record_type",
        )

    return SessionMetadata(
        lineage_type=lineage_type,
        title=_string(data.get("title"), "title"),
        record_type=record_type,
        repository=_string(data.get("repository"), "repository"),
        locator=_string(data.get("locator"), "locator"),
        session_date=_session_date(data.get("session_date")),
        projected_entities=_string_list(data.get("projected_entities"), "projected_entities"),
        extra=_extra(data, METADATA_KEYS),
    )


def _parse_block(value: Any, metadata: SessionMetadata) -> Session:
    data = _record(value, "lineage-session")
    core = _record(data.get("session"), "session")

    return Session(
        metadata=metadata,
        id=_string(core.get("id"), "session.id"),
        document=_parse_document(core.get("document")),
        sources=_typed_list(data.get("sources"), "sources", _parse_source),
        persons=_typed_list(data.get("persons"), "persons", _parse_person),
        assertions=_typed_list(data.get("assertions"), "assertions", _parse_assertion),
        citations=_typed_list(data.get("citations"), "citations", _parse_citation),
        extra=_extra(data, ("session", "sources", "persons", "assertions", "citations")),
        core_extra=_extra(core, ("id", "document")),
    )


def _parse_document(value: Any) -> SessionDocument:
    data = _record(value, "session.document")

    if "files" in data:
        files = _string_list(data["files"], "session.document.files")
        if data.get("file"):
            logger.warning("Session document has both files and legacy file; keeping files")
    else:
        legacy = _optional_string(data.get("file"), "session.document.file")
        files = [legacy] if legacy else []

    return SessionDocument(
        url=_optional_string(data.get("url"), "session.document.url") or "",
        files=files,
        transcription=_optional_string(data.get("transcription"), "session.document.transcription")
        or "",
        extra=_extra(data, ("url", "files", "file", "transcription")),
    )


def _parse_source(data: dict, label: str) -> Source:
    return Source(
        id=_string(data.get("id"), f"{label}.id"),
        title=_optional_string(data.get("title"), f"{label}.title"),
        record_type=_optional_string(data.get("record_type"), f"{label}.record_type"),
        repository=_optional_string(data.get("repository"), f"{label}.repository"),
        locator=_optional_string(data.get("locator"), f"{label}.locator"),
        extra=_extra(data, ("id", "title", "record_type", "repository", "locator")),
    )


def _parse_person(data: dict, label: str) -> Person:
    return Person(
        id=_string(data.get("id"), f"{label}.id"),
        name=_optional_string(data.get("name"), f"{label}.name"),
        sex=_optional_string(data.get("sex"), f"{label}.sex"),
        matched_to=_optional_string(data.get("matched_to"), f"{label}.matched_to"),
        extra=_extra(data, ("id", "name", "sex", "matched_to")),
    )


def _parse_assertion(data: dict, label: str) -> Assertion:
    participants = None
    if "participants" in data:
        participants = _typed_list(
            data["participants"], f"{label}.participants", _parse_participant
        )

    return Assertion(
        id=_string(data.get("id"), f"{label}.id"),
        type=_string(data.get("type"), f"{label}.type"),
        participants=participants,
        parent_ref=_optional_string(data.get("parent_ref"), f"{label}.parent_ref"),
        child_ref=_optional_string(data.get("child_ref"), f"{label}.child_ref"),
        citations=_string_list(data.get("citations"), f"{label}.citations"),
        extra=_extra(data, ("id", "type", "participants", "parent_ref", "child_ref", "citations")),
    )


def _parse_participant(data: dict, label: str) -> Participant:
    principal = data.get("principal")
    if principal is not None and not isinstance(principal, bool):
        raise SchemaError(
            f"Expected {label}.principal to be a boolean, got {type(principal).__name__}",
            f"{label}.principal",
        )
    return Participant(
        person_ref=_string(data.get("person_ref"), f"{label}.person_ref"),
        principal=principal,
        role=_optional_string(data.get("role"), f"{label}.role"),
        extra=_extra(data, ("person_ref", "principal", "role")),
    )


def _parse_citation(data: dict, label: str) -> Citation:
    return Citation(
        id=_string(data.get("id"), f"{label}.id"),
        source_id=_optional_string(data.get("source_id"), f"{label}.source_id"),
        snippet=_optional_string(data.get("snippet"), f"{label}.snippet"),
        locator=_optional_string(data.get("locator"), f"{label}.locator"),
        extra=_extra(data, ("id", "source_id", "snippet", "locator")),
    )


def _record(value: Any, label: str) -> dict:
    if not isinstance(value, dict):
        raise SchemaError(f"Expected {label} to be an object", label)
    return value


def _typed_list(value: Any, label: str, parser) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SchemaError(f"Expected {label} to be an array", label)
    return [
        parser(_record(item, f"{label}[{index}]"), f"{label}[{index}]")
        for index, item in enumerate(value)
    ]


def _string_list(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SchemaError(f"Expected {label} to be an array", label)
    return [_string(item, f"{label}[{index}]") for index, item in enumerate(value)]


def _string(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise SchemaError(
            f"Expected {label} to be a string, got {_type_name(value)}", label
        )
    return value


def _optional_string(value: Any, label: str) -> str | None:
    if value is None:
        return None
    return _string(value, label)


def _session_date(value: Any) -> str | None:
    date_text = _optional_string(value, "session_date")
    if date_text is not None and not SESSION_DATE_RE.match(date_text):
        raise SchemaError(
            f"Invalid session_date format: {date_text}. Expected YYYY-MM-DD", "session_date"
        )
    return date_text


def _extra(data: dict, known: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


# ------------------------------------------------------------------ #
#  Serialization                                                      #
# ------------------------------------------------------------------ #


def _metadata_to_dict(metadata: SessionMetadata) -> dict[str, Any]:
    data: dict[str, Any] = {
        "lineage_type": metadata.lineage_type,
        "title": metadata.title,
        "record_type": metadata.record_type,
        "repository": metadata.repository,
        "locator": metadata.locator,
    }
    if metadata.session_date:
        data["session_date"] = metadata.session_date
    data["projected_entities"] = list(metadata.projected_entities)
    data.update(metadata.extra)
    return data


def _block_to_dict(session: Session) -> dict[str, Any]:
    document = session.document
    core: dict[str, Any] = {
        "id": session.id,
        "document": {
            "url": document.url,
            "files": list(document.files),
            "transcription": document.transcription,
            **document.extra,
        },
        **session.core_extra,
    }
    return {
        "session": core,
        "sources": [_source_to_dict(source) for source in session.sources],
        "persons": [_person_to_dict(person) for person in session.persons],
        "assertions": [_assertion_to_dict(assertion) for assertion in session.assertions],
        "citations": [_citation_to_dict(citation) for citation in session.citations],
        **session.extra,
    }


def _source_to_dict(source: Source) -> dict[str, Any]:
    data = _compact(
        id=source.id,
        title=source.title,
        record_type=source.record_type,
        repository=source.repository,
        locator=source.locator,
    )
    data.update(source.extra)
    return data


def _person_to_dict(person: Person) -> dict[str, Any]:
    data = _compact(id=person.id, name=person.name, sex=person.sex)
    data["matched_to"] = person.matched_to
    data.update(person.extra)
    return data


def _assertion_to_dict(assertion: Assertion) -> dict[str, Any]:
    data: dict[str, Any] = {"id": assertion.id, "type": assertion.type}
    if assertion.participants is not None:
        data["participants"] = [_participant_to_dict(p) for p in assertion.participants]
    data.update(_compact(parent_ref=assertion.parent_ref, child_ref=assertion.child_ref))
    data.update(assertion.extra)
    if assertion.citations:
        data["citations"] = list(assertion.citations)
    return data


def _participant_to_dict(participant: Participant) -> dict[str, Any]:
    data = _compact(
        person_ref=participant.person_ref,
        principal=participant.principal,
        role=participant.role,
    )
    data.update(participant.extra)
    return data


def _citation_to_dict(citation: Citation) -> dict[str, Any]:
    data = _compact(
        id=citation.id,
        source_id=citation.source_id,
        snippet=citation.snippet,
        locator=citation.locator,
    )
    data.update(citation.extra)
    return data


def _compact(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}
