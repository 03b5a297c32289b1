"""Natural-key lookup over the records a session projected previously.

The index is seeded from the session's ``projected_entities`` links, so a
second projection of the same session finds the records the first run
wrote instead of creating duplicates.

Optional keys (event date and place) are compared only when both sides
have a value; a missing value never rules a record out.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from lineage.session.model import Session
from lineage.store.base import VaultFile, VaultStore, extract_link_target

logger = logging.getLogger(__name__)


@dataclass
class ProjectedEntity:
    file: VaultFile
    lineage_type: str
    lineage_id: str | None = None
    name: str | None = None
    title: str | None = None
    record_type: str | None = None
    repository: str | None = None
    event_type: str | None = None
    date: str | None = None
    place: str | None = None
    participants: list[str] | None = None
    relationship_type: str | None = None
    person_a: str | None = None
    person_b: str | None = None

    @classmethod
    def from_frontmatter(cls, file: VaultFile, frontmatter: dict[str, Any]) -> "ProjectedEntity":
        def text(key: str) -> str | None:
            value = frontmatter.get(key)
            return value if isinstance(value, str) else None

        participants = frontmatter.get("participants")
        return cls(
            file=file,
            lineage_type=frontmatter["lineage_type"],
            lineage_id=text("lineage_id"),
            name=text("name"),
            title=text("title"),
            record_type=text("record_type"),
            repository=text("repository"),
            event_type=text("event_type"),
            date=text("date"),
            place=text("place"),
            participants=(
                [value for value in participants if isinstance(value, str)]
                if isinstance(participants, list)
                else None
            ),
            relationship_type=text("relationship_type"),
            person_a=text("person_a"),
            person_b=text("person_b"),
        )


def normalize_value(value: str) -> str:
    return value.strip().lower()


def normalize_link(value: str) -> str:
    return normalize_value(extract_link_target(value))


def normalize_participants(participants: list[str]) -> list[str]:
    return sorted(normalize_link(value) for value in participants)


@dataclass
class EntityResolver:
    """Index of previously projected records for one projection run."""

    entries: list[ProjectedEntity] = field(default_factory=list)
    by_lineage_id: dict[str, ProjectedEntity] = field(default_factory=dict)

    @classmethod
    def build(cls, store: VaultStore, session: Session) -> "EntityResolver":
        """Index every resolvable, typed record linked from the session header."""
        resolver = cls()
        for link in session.metadata.projected_entities:
            file = store.resolve_link(link)
            if file is None:
                logger.debug(f"Projected entity link does not resolve: {link}")
                continue
            frontmatter = store.get_frontmatter(file)
            if not isinstance(frontmatter.get("lineage_type"), str):
                continue
            resolver.add(ProjectedEntity.from_frontmatter(file, frontmatter))
        return resolver

    def add(self, entry: ProjectedEntity) -> None:
        self.entries.append(entry)
        if entry.lineage_id:
            self.by_lineage_id[entry.lineage_id] = entry

    def _of_type(self, lineage_type: str):
        return (entry for entry in self.entries if entry.lineage_type == lineage_type)

    def find_person(self, name: str) -> VaultFile | None:
        """First person record whose name (or file basename) equals ``name``."""
        normalized = normalize_value(name)
        for entry in self._of_type("person"):
            if normalize_value(entry.name or entry.file.basename) == normalized:
                return entry.file
        return None

    def find_event(
        self,
        event_type: str,
        participants: list[str],
        date: str | None = None,
        place: str | None = None,
    ) -> VaultFile | None:
        """Previously projected event with the same type and participants.

        Participants match as a set of link targets. A date or place only rules
        an entry out when both sides have one and they differ.

        Args:
            event_type: Event type to match.
            participants: Person links in any order.
            date: Date of the event being projected.
            place: Place link of the event being projected.

        Returns:
            The matching record, or ``None``.
        """
        wanted = normalize_participants(participants)
        wanted_place = normalize_link(place) if place else None

        for entry in self._of_type("event"):
            if entry.event_type != event_type:
                continue
            if normalize_participants(entry.participants or []) != wanted:
                continue
            if date and entry.date and entry.date != date:
                continue
            if wanted_place and entry.place and normalize_link(entry.place) != wanted_place:
                continue
            return entry.file
        return None

    def find_relationship(
        self, relationship_type: str, person_a: str, person_b: str
    ) -> VaultFile | None:
        """Relationship of this type from ``person_a`` to ``person_b``; order matters."""
        wanted_a = normalize_link(person_a)
        wanted_b = normalize_link(person_b)

        for entry in self._of_type("relationship"):
            if entry.relationship_type != relationship_type:
                continue
            if not entry.person_a or not entry.person_b:
                continue
            if normalize_link(entry.person_a) == wanted_a and normalize_link(entry.person_b) == wanted_b:
                return entry.file
        return None

    def find_source(
        self,
        title: str,
        record_type: str | None = None,
        repository: str | None = None,
    ) -> VaultFile | None:
        """Source with this title; record type and repository narrow it when given."""
        wanted_title = normalize_value(title)
        wanted_record = normalize_value(record_type) if record_type else ""
        wanted_repo = normalize_value(repository) if repository else ""

        for entry in self._of_type("source"):
            if normalize_value(entry.title or entry.file.basename) != wanted_title:
                continue
            if wanted_record and normalize_value(entry.record_type or "") != wanted_record:
                continue
            if wanted_repo and normalize_value(entry.repository or "") != wanted_repo:
                continue
            return entry.file
        return None


def find_file_by_lineage_id(store: VaultStore, lineage_id: str) -> VaultFile | None:
    """Scan the whole store for a record stamped with ``lineage_id``."""
    wanted = lineage_id.strip()
    if not wanted:
        return None
    for file in store.list_files():
        if store.get_frontmatter(file).get("lineage_id") == wanted:
            return file
    return None
