"""Residence assertions become a residence event at a place."""

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


def project_residence_assertions(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    assertions = [a for a in session.assertions if a.type == "residence"]
    if not assertions:
        return

    persons_by_id = session.persons_by_id()
    for assertion in assertions:
        participants = order_participants(assertion.participants or [])
        if not participants:
            summary.errors.append(f"Residence assertion {assertion.id} has no participants.")
            continue

        place = (assertion.text("place") or "").strip()
        if not place:
            summary.errors.append(f"Residence assertion {assertion.id} requires a place.")
            continue

        person_files = resolve_participant_files(
            context, state, summary, persons_by_id, participants, "Residence"
        )
        if not person_files:
            continue

        place_link = wikilink_for_file(ensure_place_file(context, state, summary, place))
        date = assertion.text("date")
        event = ensure_event_file(
            context,
            state,
            summary,
            event_filename("residence", person_files[0].basename, extract_year(date)),
            "residence",
            [wikilink_for_file(file) for file in person_files],
            date=date,
            place=place_link,
        )
        state.record_target(assertion.id, "event", event)
