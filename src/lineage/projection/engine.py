"""Projection engine: runs the rules over a session in a fixed order.

Run order:
1. Index the records the session projected before.
2. Ensure the base folders exist.
3. Backfill names from identity assertions, then resolve or create a
   person record for every session person.
4. Run each rule (identity, birth/death, marriage, parent-child,
   residence, citations).
5. Note unsupported assertion types.
6. Point the session's ``projected_entities`` at every touched record.
"""

import logging
from collections import Counter

from lineage.config import Config
from lineage.errors import LineageError
from lineage.index.vault_indexer import VaultIndexer
from lineage.projection.helpers import ensure_base_folders, ensure_person_file, wikilink_for_file
from lineage.projection.resolver import EntityResolver
from lineage.projection.rules import PROJECTION_RULES
from lineage.projection.rules.identity import apply_identity_details
from lineage.projection.types import ProjectionContext, ProjectionState, ProjectionSummary
from lineage.session.model import PROJECTED_ASSERTION_TYPES, Session
from lineage.store.base import VaultFile, VaultStore

logger = logging.getLogger(__name__)


class ProjectionEngine:
    """Projects research sessions into entity records of a store."""

    def __init__(
        self,
        store: VaultStore,
        config: Config | None = None,
        indexer: VaultIndexer | None = None,
    ):
        if indexer is None:
            indexer = VaultIndexer(store)
            indexer.rebuild()
        self.context = ProjectionContext(store=store, config=config or Config(), indexer=indexer)

    @property
    def store(self) -> VaultStore:
        return self.context.store

    def project_session(
        self, session: Session, session_file: VaultFile | str | None = None
    ) -> ProjectionSummary:
        """Project one session and return what was created and updated.

        The session is updated in place: unmatched persons get a
        ``matched_to`` link and ``metadata.projected_entities`` lists every
        record touched. When ``session_file`` is given its header is updated
        too. Store failures end the run and come back as a single summary
        error; records written before the failure are kept.
        """
        summary = ProjectionSummary()
        try:
            state = ProjectionState(resolver=EntityResolver.build(self.store, session))
            ensure_base_folders(self.store, self.context.config)

            self._project_session_persons(state, summary, session)
            for rule in PROJECTION_RULES:
                rule(self.context, state, summary, session)
            self._append_coverage_notes(summary, session)

            links = list(
                dict.fromkeys(
                    wikilink_for_file(file)
                    for file in sorted(state.projected_files.values(), key=lambda f: f.path)
                )
            )
            session.metadata.projected_entities = links
            if session_file is not None:
                self.store.update_frontmatter(session_file, {"projected_entities": links})
        except LineageError as exc:
            logger.error(f"Projection failed: {exc}")
            summary.errors = [f"Projection failed: {exc}"]
            return summary

        logger.info(
            f"Projected session {session.id}: "
            f"{len(summary.created)} created, {len(summary.updated)} updated, "
            f"{len(summary.errors)} error(s)"
        )
        return summary

    def _project_session_persons(
        self, state: ProjectionState, summary: ProjectionSummary, session: Session
    ) -> None:
        persons_by_id = session.persons_by_id()
        for assertion in session.assertions:
            if assertion.type != "identity":
                continue
            for participant in assertion.participants or []:
                if participant.person_ref in persons_by_id:
                    apply_identity_details(persons_by_id[participant.person_ref], assertion)

        for person in session.persons:
            file = ensure_person_file(self.context, state, summary, person)
            if not person.is_matched:
                person.matched_to = wikilink_for_file(file)

    @staticmethod
    def _append_coverage_notes(summary: ProjectionSummary, session: Session) -> None:
        unsupported = Counter(
            a.type for a in session.assertions if a.type not in PROJECTED_ASSERTION_TYPES
        )
        for assertion_type, count in unsupported.items():
            plural = "" if count == 1 else "s"
            summary.notes.append(
                f"{count} {assertion_type} assertion{plural} not projected by design."
            )
