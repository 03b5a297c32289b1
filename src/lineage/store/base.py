"""Abstract record store.

Records are markdown files addressed by vault-relative, forward-slash
paths. Subclasses provide the raw primitives (read/write/list/move);
header handling, link resolution and change notifications live here.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import unquote

from lineage.config import normalize_vault_path
from lineage.errors import StoreError
from lineage.store.frontmatter import merge_frontmatter, split_frontmatter

logger = logging.getLogger(__name__)

MARKDOWN_LINK_RE = re.compile(r"^\[[^\]]*\]\((?P<target>[^)]+)\)$")

EventKind = Literal["create", "modify", "delete", "rename"]


@dataclass(frozen=True)
class VaultFile:
    """Handle to a record in a store."""

    path: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def basename(self) -> str:
        name = self.name
        return name[:-3] if name.lower().endswith(".md") else name

    @property
    def parent(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""


@dataclass(frozen=True)
class StoreEvent:
    kind: EventKind
    file: VaultFile
    old_path: str | None = None


Listener = Callable[[StoreEvent], None]


def extract_link_target(link: str) -> str:
    """Target of a wikilink or markdown link, without alias or heading.

    ``[[Jane Doe|Jane]]`` -> ``Jane Doe``; ``[[Jane Doe#Births]]`` ->
    ``Jane Doe``; ``[Jane](People/Jane%20Doe.md)`` -> ``People/Jane Doe.md``.
    Bare text is returned trimmed.
    """
    value = link.strip()
    if value.startswith("[[") and value.endswith("]]"):
        value = value[2:-2]
    elif match := MARKDOWN_LINK_RE.match(value):
        value = unquote(match.group("target").strip())
    value = value.split("|", 1)[0]
    value = value.split("#", 1)[0]
    return value.strip()


class VaultStore(ABC):
    """Record store operations shared by every backend."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------ #
    #  Backend primitives                                                 #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _has_file(self, path: str) -> bool: ...

    @abstractmethod
    def _has_folder(self, path: str) -> bool: ...

    @abstractmethod
    def _read(self, path: str) -> str: ...

    @abstractmethod
    def _write(self, path: str, content: str) -> None: ...

    @abstractmethod
    def _make_folder(self, path: str) -> None: ...

    @abstractmethod
    def _remove(self, path: str) -> None: ...

    @abstractmethod
    def _move(self, old_path: str, new_path: str) -> None: ...

    @abstractmethod
    def _paths(self) -> list[str]:
        """All markdown record paths, in a stable order."""

    # ------------------------------------------------------------------ #
    #  Lookup                                                             #
    # ------------------------------------------------------------------ #

    def get_file(self, path: str) -> VaultFile | None:
        normalized = normalize_vault_path(path)
        return VaultFile(normalized) if self._has_file(normalized) else None

    def exists(self, path: str) -> bool:
        normalized = normalize_vault_path(path)
        return self._has_file(normalized) or self._has_folder(normalized)

    def folder_exists(self, path: str) -> bool:
        return self._has_folder(normalize_vault_path(path))

    def list_files(self) -> list[VaultFile]:
        return [VaultFile(path) for path in self._paths()]

    def resolve_link(self, link: str) -> VaultFile | None:
        """Find the record a link points to.

        Tries the exact path, the path with ``.md`` appended, then the
        first record whose basename (or path suffix) equals the target.
        """
        target = extract_link_target(link)
        if not target:
            return None

        normalized = normalize_vault_path(target)
        for candidate in (normalized, f"{normalized}.md"):
            if self._has_file(candidate):
                return VaultFile(candidate)

        stem = normalized[:-3] if normalized.lower().endswith(".md") else normalized
        for path in self._paths():
            file = VaultFile(path)
            if file.basename == stem or path.endswith(f"/{stem}.md"):
                return file
        return None

    # ------------------------------------------------------------------ #
    #  Content                                                            #
    # ------------------------------------------------------------------ #

    def read(self, file: VaultFile | str) -> str:
        path = self._require(file)
        return self._read(path)

    def create(self, path: str, content: str) -> VaultFile:
        """Create a new record; refuses to overwrite an existing one."""
        normalized = normalize_vault_path(path)
        if self._has_file(normalized):
            raise StoreError(f"File already exists: {normalized}")
        self._write(normalized, content)
        file = VaultFile(normalized)
        logger.debug(f"Created {normalized}")
        self._emit(StoreEvent("create", file))
        return file

    def modify(self, file: VaultFile | str, content: str) -> None:
        """Overwrite the whole content of an existing record."""
        path = self._require(file)
        self._write(path, content)
        self._emit(StoreEvent("modify", VaultFile(path)))

    def create_folder(self, path: str) -> None:
        normalized = normalize_vault_path(path)
        if normalized and not self._has_folder(normalized):
            self._make_folder(normalized)

    def delete(self, file: VaultFile | str) -> None:
        path = self._require(file)
        self._remove(path)
        self._emit(StoreEvent("delete", VaultFile(path)))

    def rename(self, file: VaultFile | str, new_path: str) -> VaultFile:
        old_path = self._require(file)
        normalized = normalize_vault_path(new_path)
        if self._has_file(normalized):
            raise StoreError(f"File already exists: {normalized}")
        self._move(old_path, normalized)
        renamed = VaultFile(normalized)
        self._emit(StoreEvent("rename", renamed, old_path=old_path))
        return renamed

    # ------------------------------------------------------------------ #
    #  Frontmatter                                                        #
    # ------------------------------------------------------------------ #

    def get_frontmatter(self, file: VaultFile | str) -> dict[str, Any]:
        """Parsed header mapping of a record, ``{}`` when absent or unreadable."""
        path = self._require(file)
        frontmatter, _, _ = split_frontmatter(self._read(path))
        return frontmatter

    def update_frontmatter(self, file: VaultFile | str, updates: dict[str, Any]) -> None:
        """Merge ``updates`` into a record's header; ``None`` values are skipped."""
        path = self._require(file)
        self.modify(path, merge_frontmatter(self._read(path), updates))

    # ------------------------------------------------------------------ #
    #  Change notifications                                               #
    # ------------------------------------------------------------------ #

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _require(self, file: VaultFile | str) -> str:
        path = normalize_vault_path(file.path if isinstance(file, VaultFile) else file)
        if not self._has_file(path):
            raise StoreError(f"File not found: {path}")
        return path
