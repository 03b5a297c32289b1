"""Record store capability: markdown records with a YAML header.

``MemoryVault`` keeps records in memory; ``FileSystemVault`` maps the same
operations onto a directory tree.
"""

from lineage.store.base import StoreEvent, VaultFile, VaultStore
from lineage.store.filesystem import FileSystemVault
from lineage.store.memory import MemoryVault

__all__ = ["FileSystemVault", "MemoryVault", "StoreEvent", "VaultFile", "VaultStore"]
