"""Central configuration for the Lineage research assistant."""

import os
import re
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load .env file from project root
load_dotenv()

DEFAULT_BASE_FOLDER = "Lineage"


def normalize_vault_path(path: str) -> str:
    """Normalize a vault-relative path: forward slashes, no duplicate or trailing slash."""
    normalized = path.replace("\\", "/")
    normalized = re.sub(r"/+", "/", normalized)
    return normalized.rstrip("/")


def normalize_base_folder(value: str) -> str:
    """Normalize the configured base folder, falling back to the default."""
    trimmed = value.strip()
    normalized = normalize_vault_path(trimmed or DEFAULT_BASE_FOLDER)
    normalized = normalized.lstrip("/")
    return normalized or DEFAULT_BASE_FOLDER


class Config(BaseModel):
    """All configuration for the Lineage research assistant.

    Folder settings are vault-relative. The vault root can be overridden
    via environment or .env file.
    """

    # Vault
    vault_root: Path = Field(default=Path(os.getenv("LINEAGE_VAULT_ROOT", "vault")))
    base_folder: str = Field(
        default=os.getenv("LINEAGE_BASE_FOLDER", DEFAULT_BASE_FOLDER),
        validate_default=True,
    )
    sessions_folder: str = "Sessions"

    # Duplicate matching
    match_min_score: float = 0.5
    match_limit: int = 5

    @field_validator("base_folder")
    @classmethod
    def _normalize_base_folder(cls, value: str) -> str:
        return normalize_base_folder(value)

    @field_validator("sessions_folder")
    @classmethod
    def _normalize_sessions_folder(cls, value: str) -> str:
        return normalize_vault_path(value.strip()).lstrip("/") or "Sessions"
