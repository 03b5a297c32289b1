"""Starting text for a new research session note."""

from datetime import date

from lineage.session.model import RECORD_TYPES, SESSION_LINEAGE_TYPE
from lineage.store.frontmatter import dump_yaml
from lineage.utils.ids import generate_session_id


def build_session_template(
    title: str,
    session_date: str | None = None,
    record_type: str = "other",
    repository: str = "",
    locator: str = "",
    document_url: str = "",
    document_files: list[str] | None = None,
    transcription: str = "",
) -> str:
    """Render an empty session note with a fresh session id.

    ``session_date`` defaults to today. All values are YAML-escaped, so
    quotes and newlines survive a parse of the result.
    """
    if record_type not in RECORD_TYPES:
        raise ValueError(f"Unknown record type: {record_type}")

    metadata = {
        "lineage_type": SESSION_LINEAGE_TYPE,
        "title": title,
        "record_type": record_type,
        "repository": repository,
        "locator": locator,
        "session_date": session_date or date.today().isoformat(),
        "projected_entities": [],
    }
    block = {
        "session": {
            "id": generate_session_id(),
            "document": {
                "url": document_url,
                "files": list(document_files or []),
                "transcription": transcription,
            },
        },
        "sources": [],
        "persons": [],
        "assertions": [],
        "citations": [],
    }

    header = dump_yaml(metadata).rstrip("\n")
    body = dump_yaml(block).rstrip("\n")
    return (
        f"---\n{header}\n---\n\n"
        f"# {title}\n\n"
        "## Notes\n\n\n"
        f"```lineage-session\n{body}\n```\n"
    )
