"""Record store backed by a directory of UTF-8 markdown files."""

import logging
import os
import tempfile
from pathlib import Path

from lineage.errors import StoreError
from lineage.store.base import VaultStore

logger = logging.getLogger(__name__)


class FileSystemVault(VaultStore):
    """Maps vault-relative paths onto files under ``root``.

    Writes go to a temporary sibling that replaces the target, so a failed
    write leaves the previous content in place. Hidden directories (such as
    an editor's settings folder) are not listed.
    """

    def __init__(self, root: Path | str):
        super().__init__()
        self.root = Path(root)

    def _full(self, path: str) -> Path:
        return self.root / path

    def _has_file(self, path: str) -> bool:
        return bool(path) and self._full(path).is_file()

    def _has_folder(self, path: str) -> bool:
        return bool(path) and self._full(path).is_dir()

    def _read(self, path: str) -> str:
        try:
            return self._full(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Failed to read {path}: {exc}") from exc

    def _write(self, path: str, content: str) -> None:
        target = self._full(path)
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Failed to write {path}: {exc}") from exc

    def _make_folder(self, path: str) -> None:
        try:
            self._full(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to create folder {path}: {exc}") from exc

    def _remove(self, path: str) -> None:
        try:
            self._full(path).unlink()
        except OSError as exc:
            raise StoreError(f"Failed to delete {path}: {exc}") from exc

    def _move(self, old_path: str, new_path: str) -> None:
        target = self._full(new_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            os.replace(self._full(old_path), target)
        except OSError as exc:
            raise StoreError(f"Failed to rename {old_path} to {new_path}: {exc}") from exc

    def _paths(self) -> list[str]:
        if not self.root.is_dir():
            logger.warning(f"Vault root does not exist: {self.root}")
            return []
        paths = []
        for file in self.root.rglob("*.md"):
            relative = file.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if file.is_file():
                paths.append(relative.as_posix())
        return sorted(paths)
