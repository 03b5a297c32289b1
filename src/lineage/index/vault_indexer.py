"""Name index over the person and place records of a store.

Only records whose header declares ``lineage_type: person`` or
``lineage_type: place`` (any case) with a non-blank ``name`` are indexed.
Lookups are case-insensitive substring matches returned in index order.
"""

import logging
from dataclasses import dataclass
from typing import Any

from lineage.store.base import StoreEvent, VaultFile, VaultStore

logger = logging.getLogger(__name__)


@dataclass
class PersonIndexEntry:
    file: VaultFile
    name: str
    normalized_name: str


@dataclass
class PlaceIndexEntry:
    file: VaultFile
    name: str
    normalized_name: str
    parent: str | None = None
    normalized_parent: str | None = None


def normalize_key(value: str) -> str:
    return value.strip().lower()


class VaultIndexer:
    """Keeps person and place entries keyed by record path.

    A record lives in at most one of the two maps; re-indexing a record
    whose type changed evicts it from the other map.
    """

    def __init__(self, store: VaultStore):
        self.store = store
        self._persons: dict[str, PersonIndexEntry] = {}
        self._places: dict[str, PlaceIndexEntry] = {}
        self._attached: VaultStore | None = None

    # ------------------------------------------------------------------ #
    #  Maintenance                                                        #
    # ------------------------------------------------------------------ #

    def rebuild(self) -> None:
        self._persons.clear()
        self._places.clear()
        for file in self.store.list_files():
            self.update_file(file)
        logger.debug(f"Indexed {len(self._persons)} person(s), {len(self._places)} place(s)")

    def update_file(self, file: VaultFile) -> None:
        """Re-derive one record's entry from its current header."""
        frontmatter = self.store.get_frontmatter(file) if self.store.get_file(file.path) else {}
        lineage_type = _lineage_type(frontmatter)

        if lineage_type == "person":
            self._places.pop(file.path, None)
            entry = _person_entry(file, frontmatter)
            if entry:
                self._persons[file.path] = entry
            else:
                self._persons.pop(file.path, None)
            return

        if lineage_type == "place":
            self._persons.pop(file.path, None)
            entry = _place_entry(file, frontmatter)
            if entry:
                self._places[file.path] = entry
            else:
                self._places.pop(file.path, None)
            return

        self.remove_path(file.path)

    def remove_path(self, path: str) -> None:
        self._persons.pop(path, None)
        self._places.pop(path, None)

    def handle_event(self, event: StoreEvent) -> None:
        if event.kind == "delete":
            self.remove_path(event.file.path)
            return
        if event.kind == "rename" and event.old_path:
            self.remove_path(event.old_path)
        self.update_file(event.file)

    def attach(self, store: VaultStore | None = None) -> None:
        """Rebuild, then follow the store's change notifications."""
        self.detach()
        if store is not None:
            self.store = store
        self.rebuild()
        self.store.subscribe(self.handle_event)
        self._attached = self.store

    def detach(self) -> None:
        if self._attached is not None:
            self._attached.unsubscribe(self.handle_event)
            self._attached = None

    # ------------------------------------------------------------------ #
    #  Queries                                                            #
    # ------------------------------------------------------------------ #

    def find_person_by_name(self, query: str) -> list[VaultFile]:
        normalized = normalize_key(query)
        if not normalized:
            return []
        return [e.file for e in self._persons.values() if normalized in e.normalized_name]

    def find_places_by_name(self, query: str) -> list[VaultFile]:
        normalized = normalize_key(query)
        if not normalized:
            return []
        return [e.file for e in self._places.values() if normalized in e.normalized_name]

    def find_places_by_parent(self, parent: str) -> list[VaultFile]:
        normalized = normalize_key(parent)
        if not normalized:
            return []
        return [e.file for e in self._places.values() if e.normalized_parent == normalized]

    def person_entries(self) -> list[PersonIndexEntry]:
        return list(self._persons.values())

    def place_entries(self) -> list[PlaceIndexEntry]:
        return list(self._places.values())


def _lineage_type(frontmatter: dict[str, Any]) -> str | None:
    value = frontmatter.get("lineage_type")
    if not isinstance(value, str):
        return None
    lowered = value.lower()
    return lowered if lowered in ("person", "place") else None


def _indexed_name(frontmatter: dict[str, Any]) -> str | None:
    name = frontmatter.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    return name


def _person_entry(file: VaultFile, frontmatter: dict[str, Any]) -> PersonIndexEntry | None:
    name = _indexed_name(frontmatter)
    if name is None:
        return None
    return PersonIndexEntry(file=file, name=name, normalized_name=normalize_key(name))


def _place_entry(file: VaultFile, frontmatter: dict[str, Any]) -> PlaceIndexEntry | None:
    name = _indexed_name(frontmatter)
    if name is None:
        return None

    parent = None
    for key in ("parent_place", "parent"):
        if isinstance(frontmatter.get(key), str):
            parent = frontmatter[key]
            break

    return PlaceIndexEntry(
        file=file,
        name=name,
        normalized_name=normalize_key(name),
        parent=parent,
        normalized_parent=normalize_key(parent) if parent else None,
    )
