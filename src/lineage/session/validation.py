"""Field-level and cross-reference checks that gate saving and projection.

Any error-level issue makes a session *blocking*; warnings are shown but
never block.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal
from urllib.parse import urlsplit

from lineage.session.model import Session
from lineage.utils.ids import classify_id_format

if TYPE_CHECKING:
    from lineage.store.base import VaultStore

IssueLevel = Literal["error", "warning"]
IssueKind = Literal["required", "format", "conditional", "integrity", "id_policy"]
IssueCode = Literal[
    "required_missing",
    "document_capture_missing",
    "url_format_invalid",
    "locator_format_invalid",
    "file_not_found",
    "ref_missing",
    "ref_invalid",
    "id_invalid",
    "id_fallback",
]
Trigger = Literal["silent", "blur", "submit"]

SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
URL_LIKE_LOCATOR_RE = re.compile(r"^(https?://|www\.)", re.IGNORECASE)


@dataclass
class ValidationIssue:
    field_key: str
    text: str
    level: IssueLevel
    kind: IssueKind
    code: IssueCode


@dataclass
class SessionValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)
    blocking: bool = False

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == "warning"]


def is_plausible_url(value: str) -> bool:
    """True when ``value`` parses as a URL with a dotted host (or localhost).

    A missing scheme is assumed to be ``https://``.
    """
    trimmed = value.strip()
    if not trimmed:
        return False

    with_scheme = trimmed if SCHEME_RE.match(trimmed) else f"https://{trimmed}"
    try:
        hostname = urlsplit(with_scheme).hostname
    except ValueError:
        return False

    if not hostname:
        return False
    return hostname == "localhost" or "." in hostname


def evaluate_session_validation(
    session: Session, store: "VaultStore | None" = None
) -> SessionValidationResult:
    """Collect every issue in a session.

    Document files are checked for existence only when ``store`` is given.
    """
    issues: list[ValidationIssue] = []
    metadata = session.metadata
    document = session.document

    def add(field_key: str, text: str, level: IssueLevel, kind: IssueKind, code: IssueCode):
        issues.append(ValidationIssue(field_key, text, level, kind, code))

    # Required header fields
    for key, label in (
        ("title", "Title"),
        ("record_type", "Record type"),
        ("repository", "Repository"),
        ("locator", "Locator"),
    ):
        value = getattr(metadata, key)
        if not value or not value.strip():
            add(f"metadata.{key}", f"{label} is required.", "error", "required", "required_missing")

    locator = metadata.locator.strip()
    if URL_LIKE_LOCATOR_RE.match(locator) and not is_plausible_url(locator):
        add(
            "metadata.locator",
            "Locator looks like a URL, but format appears invalid.",
            "warning",
            "format",
            "locator_format_invalid",
        )

    # Document capture
    if not document.has_capture():
        add(
            "document",
            "Provide a URL, file, or transcription to save the document.",
            "error",
            "conditional",
            "document_capture_missing",
        )

    url = document.url.strip()
    if url and not is_plausible_url(url):
        add(
            "document.url",
            "URL looks invalid. You can still save, but verify it.",
            "warning",
            "format",
            "url_format_invalid",
        )

    if store is not None:
        for index, path in enumerate(document.files):
            if path.strip() and store.get_file(path.strip()) is None:
                add(
                    f"document.files[{index}]",
                    "File not found in the vault.",
                    "error",
                    "format",
                    "file_not_found",
                )

    # Session id policy
    id_format = classify_id_format(session.id or "")
    if id_format == "invalid":
        add(
            "session.id",
            "Session ID is required and must use a valid ID format.",
            "error",
            "id_policy",
            "id_invalid",
        )
    elif id_format == "fallback":
        add(
            "session.id",
            "Session ID uses fallback format (UUID preferred).",
            "warning",
            "id_policy",
            "id_fallback",
        )

    # Cross references
    person_ids = {person.id.strip() for person in session.persons if person.id.strip()}
    citation_ids = {c.id.strip() for c in session.citations if c.id.strip()}

    for index, assertion in enumerate(session.assertions):
        field_key = f"assertions[{index}]"

        if assertion.type == "parent-child":
            parent_ref = (assertion.parent_ref or "").strip()
            child_ref = (assertion.child_ref or "").strip()
            if not parent_ref or not child_ref:
                add(
                    field_key,
                    "Parent-child assertions require both parent and child references.",
                    "error",
                    "integrity",
                    "ref_missing",
                )
            else:
                if parent_ref == child_ref:
                    add(
                        field_key,
                        "Parent and child must reference different people.",
                        "error",
                        "integrity",
                        "ref_invalid",
                    )
                if parent_ref not in person_ids or child_ref not in person_ids:
                    add(
                        field_key,
                        "Parent-child references must point to people in this session.",
                        "error",
                        "integrity",
                        "ref_invalid",
                    )
        elif not assertion.participants:
            add(
                field_key,
                "Assertion requires at least one participant.",
                "error",
                "integrity",
                "ref_missing",
            )

        if any(p.person_ref not in person_ids for p in assertion.participants or []):
            add(
                field_key,
                "Assertion participant references a missing session person.",
                "error",
                "integrity",
                "ref_invalid",
            )

        if any(citation_id not in citation_ids for citation_id in assertion.citations):
            add(
                field_key,
                "Assertion citation reference does not exist in session citations.",
                "error",
                "integrity",
                "ref_invalid",
            )

    return SessionValidationResult(
        issues=issues,
        blocking=any(issue.level == "error" for issue in issues),
    )


class SessionValidator:
    """Decides which issues are visible for a given validation trigger.

    ``silent`` shows nothing, ``blur`` shows the format issues of one
    field, ``submit`` shows everything and switches the validator into
    submitted mode, after which every trigger shows everything. The
    ``blocking`` flag is always computed from the full issue list.
    """

    def __init__(self, store: "VaultStore | None" = None):
        self.store = store
        self.has_submitted = False

    def trigger(
        self,
        session: Session,
        trigger: Trigger = "silent",
        field_key: str | None = None,
    ) -> SessionValidationResult:
        result = evaluate_session_validation(session, self.store)

        if trigger == "submit":
            self.has_submitted = True
        if self.has_submitted:
            return result

        visible: list[ValidationIssue] = []
        if trigger == "blur" and field_key:
            visible = [
                issue
                for issue in result.issues
                if issue.field_key == field_key and issue.kind == "format"
            ]
        return SessionValidationResult(issues=visible, blocking=result.blocking)

    def reset(self) -> None:
        self.has_submitted = False
