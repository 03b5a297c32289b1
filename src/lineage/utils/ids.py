"""Identifier generation and classification.

Session ids and lineage ids are random UUIDs. When the platform cannot
supply randomness for ``uuid4`` a timestamp-based fallback id is used;
fallback ids are accepted by validation but reported as a warning.
"""

import logging
import random
import re
import time
import uuid
from typing import Literal

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
FALLBACK_ID_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]*$")

IdFormat = Literal["uuid", "fallback", "invalid"]


def generate_fallback_id() -> str:
    """Build a ``<timestamp-hex>-<random-hex>`` id without the OS random source."""
    timestamp = format(int(time.time() * 1000), "x")
    suffix = format(random.getrandbits(52), "x")
    return f"{timestamp}-{suffix}"


def generate_session_id() -> str:
    """Generate a new session id, preferring a random UUID."""
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.warning("No OS randomness available, using fallback id format")
        return generate_fallback_id()


def generate_lineage_id() -> str:
    """Generate a stable identifier for a projected entity record."""
    return generate_session_id()


def classify_id_format(value: str) -> IdFormat:
    """Classify an identifier as ``uuid``, ``fallback`` or ``invalid``."""
    trimmed = value.strip()
    if not trimmed:
        return "invalid"
    if UUID_RE.match(trimmed):
        return "uuid"
    if FALLBACK_ID_RE.match(trimmed):
        return "fallback"
    return "invalid"


def is_uuid(value: str) -> bool:
    return classify_id_format(value) == "uuid"
