"""Typed in-memory model of a research session.

A session note has three parts: a YAML header (``SessionMetadata``), free
prose notes, and a fenced ``lineage-session`` block holding the document
capture, session persons, assertions, citations and sources.

Every entity keeps keys it does not model in an ordered ``extra`` dict so
source-carried fields survive a parse/serialize round trip untouched.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from lineage.errors import PersonInUseError

RECORD_TYPES = ("census", "vital", "church", "probate", "newspaper", "other")

SESSION_LINEAGE_TYPE = "research_session"

# Assertion types the projection engine knows how to turn into records.
# Anything else is carried through untouched.
PROJECTED_ASSERTION_TYPES = (
    "identity",
    "birth",
    "death",
    "marriage",
    "parent-child",
    "residence",
)


@dataclass
class SessionMetadata:
    """Header block of a session note."""

    title: str
    record_type: str
    repository: str
    locator: str
    session_date: str | None = None
    projected_entities: list[str] = field(default_factory=list)
    lineage_type: str = SESSION_LINEAGE_TYPE
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionDocument:
    """Where the researched document was captured from.

    At least one of ``url``, ``files`` or ``transcription`` must be filled
    in for the session to validate.
    """

    url: str = ""
    files: list[str] = field(default_factory=list)
    transcription: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def has_capture(self) -> bool:
        return bool(
            self.url.strip()
            or any(path.strip() for path in self.files)
            or self.transcription.strip()
        )


@dataclass
class Source:
    id: str
    title: str | None = None
    record_type: str | None = None
    repository: str | None = None
    locator: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Person:
    """A session-local person stub.

    ``matched_to`` is ``None`` until the person has been resolved to a
    person record; afterwards it holds a link to that record.
    """

    id: str
    name: str | None = None
    sex: str | None = None
    matched_to: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def lineage_id(self) -> str | None:
        value = self.extra.get("lineage_id")
        return value if isinstance(value, str) and value.strip() else None

    @property
    def is_matched(self) -> bool:
        return bool(self.matched_to and self.matched_to.strip())


@dataclass
class Participant:
    person_ref: str
    principal: bool | None = None
    role: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_principal(self) -> bool:
        return self.principal is True or self.role == "principal"


@dataclass
class Assertion:
    """One typed claim extracted from the document.

    Type-specific values (``date``, ``place``, ``name``, ``sex``,
    ``statement``, ...) live in ``extra``; use :meth:`text` to read them.
    """

    id: str
    type: str
    participants: list[Participant] | None = None
    parent_ref: str | None = None
    child_ref: str | None = None
    citations: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def text(self, key: str) -> str | None:
        """Return a free-form field as text.

        A bare year written without quotes loads as an integer and is
        returned as its digits; any other non-string value gives ``None``.
        """
        value = self.extra.get(key)
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return str(value)
        return value if isinstance(value, str) else None

    def references(self, person_id: str) -> bool:
        if self.parent_ref == person_id or self.child_ref == person_id:
            return True
        return any(p.person_ref == person_id for p in self.participants or [])


@dataclass
class Citation:
    id: str
    source_id: str | None = None
    snippet: str | None = None
    locator: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Session:
    """Root aggregate for one research note."""

    metadata: SessionMetadata
    id: str
    document: SessionDocument = field(default_factory=SessionDocument)
    sources: list[Source] = field(default_factory=list)
    persons: list[Person] = field(default_factory=list)
    assertions: list[Assertion] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    notes: str = ""
    # Unmodelled keys of the structured block (top level and under ``session:``)
    extra: dict[str, Any] = field(default_factory=dict)
    core_extra: dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------ #
    #  Lookups                                                            #
    # ------------------------------------------------------------------ #

    def find_person(self, person_id: str) -> Person | None:
        return next((p for p in self.persons if p.id == person_id), None)

    def persons_by_id(self) -> dict[str, Person]:
        return {person.id: person for person in self.persons}

    def citations_by_id(self) -> dict[str, Citation]:
        return {citation.id: citation for citation in self.citations}

    def assertions_referencing(self, person_id: str) -> list[Assertion]:
        return [a for a in self.assertions if a.references(person_id)]

    # ------------------------------------------------------------------ #
    #  Editing                                                            #
    # ------------------------------------------------------------------ #

    def next_person_id(self) -> str:
        return _next_local_id("p", [p.id for p in self.persons])

    def next_assertion_id(self) -> str:
        return _next_local_id("a", [a.id for a in self.assertions])

    def next_citation_id(self) -> str:
        return _next_local_id("c", [c.id for c in self.citations])

    def add_person(self, name: str | None = None, sex: str | None = None) -> Person:
        person = Person(id=self.next_person_id(), name=name, sex=sex)
        self.persons.append(person)
        return person

    def add_citation(
        self,
        snippet: str | None = None,
        locator: str | None = None,
        source_id: str | None = None,
    ) -> Citation:
        citation = Citation(
            id=self.next_citation_id(),
            source_id=source_id,
            snippet=snippet,
            locator=locator,
        )
        self.citations.append(citation)
        return citation

    def add_assertion(
        self,
        assertion_type: str,
        participants: list[str] | None = None,
        parent_ref: str | None = None,
        child_ref: str | None = None,
        citations: list[str] | None = None,
        **fields: Any,
    ) -> Assertion:
        """Append a new assertion; extra keyword fields become free-form values."""
        assertion = Assertion(
            id=self.next_assertion_id(),
            type=assertion_type,
            participants=(
                [Participant(person_ref=ref) for ref in participants]
                if participants is not None
                else None
            ),
            parent_ref=parent_ref,
            child_ref=child_ref,
            citations=list(citations or []),
            extra={k: v for k, v in fields.items() if v is not None},
        )
        self.assertions.append(assertion)
        return assertion

    def remove_person(self, person_id: str) -> Person:
        """Remove a session person that no assertion references.

        Raises:
            PersonInUseError: If any assertion still references the person.
            KeyError: If no such person exists.
        """
        referencing = self.assertions_referencing(person_id)
        if referencing:
            raise PersonInUseError(person_id, [a.id for a in referencing])

        person = self.find_person(person_id)
        if person is None:
            raise KeyError(person_id)
        self.persons.remove(person)
        return person


def _next_local_id(prefix: str, existing: list[str]) -> str:
    """Next ``<prefix><N>`` after the highest numeric suffix already in use."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)")
    numbers = [int(m.group(1)) for m in (pattern.match(value) for value in existing) if m]
    return f"{prefix}{max(numbers) + 1 if numbers else 1}"
