"""Research session documents: model, text format, validation and lifecycle."""

from lineage.session.model import (
    Assertion,
    Citation,
    Participant,
    Person,
    Session,
    SessionDocument,
    SessionMetadata,
    Source,
)
from lineage.session.parser import parse_session, serialize_session

__all__ = [
    "Assertion",
    "Citation",
    "Participant",
    "Person",
    "Session",
    "SessionDocument",
    "SessionMetadata",
    "Source",
    "parse_session",
    "serialize_session",
]
