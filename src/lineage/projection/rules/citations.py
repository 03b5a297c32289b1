"""Source and citation records for everything the earlier rules projected.

One source record per session, keyed by (title, record_type, repository).
One citation record per (assertion, target) pair at a deterministic path;
an existing citation at that path is overwritten, not merged.
"""

import logging
from typing import Any

from lineage.projection.helpers import get_entity_folder, get_unique_path, update_record
from lineage.projection.templates import build_citation_template, build_source_template
from lineage.projection.types import (
    ProjectionContext,
    ProjectionState,
    ProjectionSummary,
    ProjectionTarget,
)
from lineage.session.model import Assertion, Citation, Session
from lineage.store.base import VaultFile, VaultStore
from lineage.utils.filename import citation_filename, sanitize_filename
from lineage.utils.ids import generate_lineage_id

logger = logging.getLogger(__name__)


def _normalize(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def find_existing_source(
    store: VaultStore,
    title: str,
    record_type: str | None = None,
    repository: str | None = None,
) -> VaultFile | None:
    """First ``lineage_type: source`` record in the store matching the key.

    ``record_type`` and ``repository`` are compared only when given.
    """
    wanted_title = _normalize(title)
    wanted_record = _normalize(record_type)
    wanted_repo = _normalize(repository)

    for file in store.list_files():
        frontmatter = store.get_frontmatter(file)
        if frontmatter.get("lineage_type") != "source":
            continue
        if _normalize(frontmatter.get("title")) != wanted_title:
            continue
        if wanted_record and _normalize(frontmatter.get("record_type")) != wanted_record:
            continue
        if wanted_repo and _normalize(frontmatter.get("repository")) != wanted_repo:
            continue
        return file
    return None


def ensure_source_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> VaultFile:
    store = context.store
    metadata = session.metadata
    title = metadata.title.strip()

    existing = state.resolver.find_source(
        title, record_type=metadata.record_type, repository=metadata.repository
    ) or find_existing_source(
        store, title, record_type=metadata.record_type, repository=metadata.repository
    )
    if existing is not None:
        update_record(store, existing, {"lineage_type": "source"})
        summary.record_updated("source", existing)
        state.register(existing)
        return existing

    folder = get_entity_folder(context.config, "source")
    path = get_unique_path(store, f"{folder}/{sanitize_filename(title or 'Source')}.md")
    file = store.create(
        path,
        build_source_template(
            title,
            record_type=metadata.record_type,
            repository=metadata.repository,
            locator=metadata.locator,
            date=metadata.session_date,
        ),
    )
    summary.record_created("source", file)
    state.register(file)
    return file


def first_citation(assertion: Assertion, citations_by_id: dict[str, Citation]) -> Citation | None:
    if not assertion.citations:
        return None
    return citations_by_id.get(assertion.citations[0])


def target_label(file: VaultFile, frontmatter: dict[str, Any]) -> str:
    for key in ("name", "title"):
        value = frontmatter.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return file.basename


def ensure_citation_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    source_id: str,
    source_title: str,
    target: ProjectionTarget,
    assertion_id: str,
    citation: Citation | None,
) -> VaultFile:
    store = context.store

    target_frontmatter = store.get_frontmatter(target.file)
    target_id = target_frontmatter.get("lineage_id")
    if not isinstance(target_id, str) or not target_id.strip():
        target_id = generate_lineage_id()
        store.update_frontmatter(
            target.file, {"lineage_type": target.type, "lineage_id": target_id}
        )

    filename = citation_filename(
        source_title, target_label(target.file, target_frontmatter), assertion_id
    )
    path = f"{get_entity_folder(context.config, 'citation')}/{filename}.md"

    existing = store.get_file(path)
    existing_id = store.get_frontmatter(existing).get("lineage_id") if existing else None
    content = build_citation_template(
        source_id,
        target_id,
        target.type,
        assertion_id,
        snippet=citation.snippet if citation else None,
        locator=citation.locator if citation else None,
        lineage_id=existing_id if isinstance(existing_id, str) else None,
    )

    if existing is not None:
        store.modify(existing, content)
        summary.record_updated("citation", existing)
        state.register(existing)
        return existing

    file = store.create(path, content)
    summary.record_created("citation", file)
    state.register(file)
    return file


def project_citations(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    if not session.assertions:
        return

    title = session.metadata.title.strip()
    if not title:
        summary.errors.append("Session title required for Source creation.")
        return

    source_file = ensure_source_file(context, state, summary, session)
    source_id = context.store.get_frontmatter(source_file).get("lineage_id")
    if not isinstance(source_id, str) or not source_id.strip():
        source_id = generate_lineage_id()
        context.store.update_frontmatter(
            source_file, {"lineage_type": "source", "lineage_id": source_id}
        )

    citations_by_id = session.citations_by_id()
    for assertion in session.assertions:
        targets = state.assertion_targets.get(assertion.id, [])
        if not targets:
            continue

        citation = first_citation(assertion, citations_by_id)
        for target in targets:
            ensure_citation_file(
                context, state, summary, source_id, title, target, assertion.id, citation
            )
        logger.debug(f"Cited {len(targets)} target(s) for assertion {assertion.id}")
