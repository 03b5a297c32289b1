"""URL/file-safe slugs for session filenames."""

import re


def slugify(value: str) -> str:
    """Lowercase slug with quotes dropped and other punctuation collapsed to ``-``.

    Returns ``"session"`` when nothing usable is left.
    """
    trimmed = value.strip().lower()
    slug = re.sub(r"['\"`]", "", trimmed)
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    slug = re.sub(r"-+", "-", slug)
    return slug or "session"
