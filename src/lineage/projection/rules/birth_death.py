"""Birth and death assertions become one event per assertion."""

import logging

from lineage.projection.helpers import (
    ensure_event_file,
    ensure_place_file,
    order_participants,
    resolve_participant_files,
    wikilink_for_file,
)
from lineage.projection.types import ProjectionContext, ProjectionState, ProjectionSummary
from lineage.session.model import Session
from lineage.utils.filename import event_filename, extract_year

logger = logging.getLogger(__name__)


def project_birth_death_assertions(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    """Project each birth/death assertion to ``Events/<Type> - <principal> - <year>``.

    The event and the principal's person record become the assertion's
    citation targets. Assertions without participants are skipped.
    """
    assertions = [a for a in session.assertions if a.type in ("birth", "death")]
    if not assertions:
        return

    persons_by_id = session.persons_by_id()
    for assertion in assertions:
        participants = order_participants(assertion.participants or [])
        if not participants:
            logger.debug(f"Skipping {assertion.type} assertion {assertion.id} without participants")
            continue

        person_files = resolve_participant_files(
            context, state, summary, persons_by_id, participants, "Birth/Death"
        )
        if not person_files:
            continue

        date = assertion.text("date")
        place = assertion.text("place")
        place_link = None
        if place:
            place_link = wikilink_for_file(ensure_place_file(context, state, summary, place))

        principal = person_files[0]
        event_file = ensure_event_file(
            context,
            state,
            summary,
            event_filename(assertion.type, principal.basename, extract_year(date)),
            assertion.type,
            [wikilink_for_file(file) for file in person_files],
            date=date,
            place=place_link,
        )
        state.record_target(assertion.id, "event", event_file)
        state.record_target(assertion.id, "person", principal)
