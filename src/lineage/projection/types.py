"""Shared state passed between the projection engine and its rules."""

from dataclasses import dataclass, field
from typing import Literal

from lineage.config import Config
from lineage.index.vault_indexer import VaultIndexer
from lineage.projection.resolver import EntityResolver
from lineage.store.base import VaultFile, VaultStore

TargetType = Literal["person", "event", "relationship"]
RecordKind = Literal["person", "place", "event", "relationship", "source", "citation"]


@dataclass
class ProjectionContext:
    store: VaultStore
    config: Config
    indexer: VaultIndexer


@dataclass
class ProjectionTarget:
    type: TargetType
    file: VaultFile


@dataclass
class ProjectionState:
    """Per-run caches.

    ``person_files`` is keyed by session-local person id, ``assertion_targets``
    by assertion id, ``projected_files`` by record path.
    """

    resolver: EntityResolver
    person_files: dict[str, VaultFile] = field(default_factory=dict)
    assertion_targets: dict[str, list[ProjectionTarget]] = field(default_factory=dict)
    projected_files: dict[str, VaultFile] = field(default_factory=dict)

    def register(self, file: VaultFile) -> None:
        self.projected_files[file.path] = file

    def record_target(self, assertion_id: str, target_type: TargetType, file: VaultFile) -> None:
        self.assertion_targets.setdefault(assertion_id, []).append(
            ProjectionTarget(target_type, file)
        )


@dataclass
class ProjectionSummary:
    """Counts and paths produced by one projection run."""

    persons_created: int = 0
    persons_updated: int = 0
    places_created: int = 0
    events_created: int = 0
    events_updated: int = 0
    relationships_created: int = 0
    relationships_updated: int = 0
    sources_created: int = 0
    sources_updated: int = 0
    citations_created: int = 0
    citations_updated: int = 0
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def record_created(self, kind: RecordKind, file: VaultFile) -> None:
        counter = f"{kind}s_created"
        setattr(self, counter, getattr(self, counter) + 1)
        if file.path not in self.created:
            self.created.append(file.path)

    def record_updated(self, kind: RecordKind, file: VaultFile) -> None:
        counter = f"{kind}s_updated"
        setattr(self, counter, getattr(self, counter) + 1)
        if file.path not in self.updated:
            self.updated.append(file.path)

    def to_dict(self) -> dict:
        return {
            "persons_created": self.persons_created,
            "persons_updated": self.persons_updated,
            "places_created": self.places_created,
            "events_created": self.events_created,
            "events_updated": self.events_updated,
            "relationships_created": self.relationships_created,
            "relationships_updated": self.relationships_updated,
            "sources_created": self.sources_created,
            "sources_updated": self.sources_updated,
            "citations_created": self.citations_created,
            "citations_updated": self.citations_updated,
            "created": list(self.created),
            "updated": list(self.updated),
            "errors": list(self.errors),
            "notes": list(self.notes),
        }
