"""Deterministic, filesystem-safe filenames for entity records.

Every projected record is named from its natural key so that projecting
the same session twice lands on the same path.
"""

import re

INVALID_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
TRAILING_DOTS_RE = re.compile(r"[. ]+$")
YEAR_RE = re.compile(r"(\d{4})")

MAX_FILENAME_LENGTH = 120


def sanitize_filename(value: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Strip path-unsafe characters, collapse whitespace and bound the length.

    Args:
        value: Free-text label (person name, event descriptor, title).
        max_length: Maximum number of characters kept.

    Returns:
        The sanitized filename stem, or ``"Untitled"`` if nothing is left.
    """
    cleaned = INVALID_CHARS_RE.sub("", value)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    cleaned = TRAILING_DOTS_RE.sub("", cleaned)

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].strip()
    return cleaned or "Untitled"


def extract_year(value: str | None) -> str | None:
    """Return the first four-digit run in a date string, if any."""
    if not value:
        return None
    match = YEAR_RE.search(value)
    return match.group(1) if match else None


def title_case(value: str) -> str:
    """Uppercase the first letter of each whitespace-separated word."""
    if not value:
        return value
    return " ".join(part[0].upper() + part[1:] for part in value.split())


def person_filename(name: str) -> str:
    return sanitize_filename(name)


def place_filename(name: str) -> str:
    return sanitize_filename(name)


def event_filename(event_type: str, principal: str, year: str | None = None) -> str:
    """``"<Type> - <principal> [- <year>]"``, e.g. ``"Birth - Jane Doe - 1900"``."""
    parts = [title_case(event_type), sanitize_filename(principal)]
    if year:
        parts.append(year)
    return sanitize_filename(" - ".join(parts))


def relationship_filename(person_a: str, person_b: str) -> str:
    safe_a = sanitize_filename(person_a)
    safe_b = sanitize_filename(person_b)
    return sanitize_filename(f"Relationship - {safe_a} & {safe_b}")


def parent_child_filename(parent_name: str, child_name: str) -> str:
    safe_parent = sanitize_filename(parent_name)
    safe_child = sanitize_filename(child_name)
    return sanitize_filename(f"Child of {safe_parent} - {safe_child}")


def citation_filename(source_title: str, target_label: str, assertion_id: str) -> str:
    return sanitize_filename(f"Citation - {source_title} - {target_label} ({assertion_id})")
