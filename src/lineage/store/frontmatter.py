"""Split and render the YAML header of a markdown record."""

import logging
import re
from typing import Any

import yaml

from lineage.errors import StoreError

logger = logging.getLogger(__name__)

FRONTMATTER_BLOCK_RE = re.compile(
    r"\A---\r?\n(?:(?P<frontmatter>.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)(?P<body>.*)\Z",
    re.DOTALL,
)


class TextDateLoader(yaml.SafeLoader):
    """Safe loader that keeps dates such as ``1900-03-15`` as plain strings."""


TextDateLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(text: str) -> Any:
    return yaml.load(text, Loader=TextDateLoader)


def dump_yaml(data: Any) -> str:
    """Block-style YAML keeping key order and non-ASCII text as written."""
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def split_frontmatter(content: str, strict: bool = False) -> tuple[dict[str, Any], str, bool]:
    """Return ``(frontmatter, rest, has_block)`` for a record.

    ``rest`` is everything after the closing ``---`` line, unchanged. A
    header that is not valid YAML or not a mapping reads as ``{}``, or
    raises ``StoreError`` when ``strict`` is set.
    """
    match = FRONTMATTER_BLOCK_RE.match(content)
    if match is None:
        return {}, content, False

    raw = match.group("frontmatter") or ""
    try:
        loaded = load_yaml(raw)
    except yaml.YAMLError as exc:
        if strict:
            raise StoreError(f"Malformed frontmatter: {exc}") from exc
        logger.warning(f"Ignoring malformed frontmatter: {exc}")
        loaded = None

    if loaded is None:
        return {}, match.group("body"), True
    if not isinstance(loaded, dict):
        if strict:
            raise StoreError("Frontmatter must be a mapping")
        return {}, match.group("body"), True
    return loaded, match.group("body"), True


def join_frontmatter(frontmatter: dict[str, Any], rest: str) -> str:
    dumped = dump_yaml(frontmatter) if frontmatter else ""
    return f"---\n{dumped}---\n{rest}"


def render_record(frontmatter: dict[str, Any], body: str) -> str:
    """Full record text: header, blank line, body."""
    return join_frontmatter(frontmatter, f"\n{body}")


def merge_frontmatter(content: str, updates: dict[str, Any]) -> str:
    """Apply ``updates`` to a record's header, keeping its body.

    Keys whose value is ``None`` are left as they are. A record without a
    header gains one.

    Raises:
        StoreError: If the existing header cannot be parsed.
    """
    frontmatter, rest, has_block = split_frontmatter(content, strict=True)
    merged = dict(frontmatter)
    for key, value in updates.items():
        if value is not None:
            merged[key] = value

    if not has_block:
        return render_record(merged, rest)
    return join_frontmatter(merged, rest)
