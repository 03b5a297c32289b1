"""In-memory record store."""

from lineage.errors import StoreError
from lineage.store.base import VaultStore


class MemoryVault(VaultStore):
    """Records held in an insertion-ordered dict keyed by path.

    Creating a record also registers its parent folders.
    """

    def __init__(self, files: dict[str, str] | None = None):
        super().__init__()
        self.files: dict[str, str] = {}
        self.folders: set[str] = set()
        for path, content in (files or {}).items():
            self._write(path, content)

    def _has_file(self, path: str) -> bool:
        return path in self.files

    def _has_folder(self, path: str) -> bool:
        return path in self.folders

    def _read(self, path: str) -> str:
        return self.files[path]

    def _write(self, path: str, content: str) -> None:
        self.files[path] = content
        self._register_parents(path)

    def _make_folder(self, path: str) -> None:
        self.folders.add(path)
        self._register_parents(path)

    def _remove(self, path: str) -> None:
        del self.files[path]

    def _move(self, old_path: str, new_path: str) -> None:
        if old_path not in self.files:
            raise StoreError(f"File not found: {old_path}")
        self._write(new_path, self.files.pop(old_path))

    def _paths(self) -> list[str]:
        return list(self.files)

    def _register_parents(self, path: str) -> None:
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:depth]))
