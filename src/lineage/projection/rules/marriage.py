"""Marriage assertions become a spouse relationship and, with a date or place, an event."""

from lineage.projection.helpers import (
    ensure_event_file,
    ensure_place_file,
    ensure_relationship_file,
    order_participants,
    resolve_participant_files,
    wikilink_for_file,
)
from lineage.projection.types import ProjectionContext, ProjectionState, ProjectionSummary
from lineage.session.model import Session
from lineage.utils.filename import event_filename, extract_year, relationship_filename


def project_marriage_assertions(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    assertions = [a for a in session.assertions if a.type == "marriage"]
    if not assertions:
        return

    persons_by_id = session.persons_by_id()
    for assertion in assertions:
        participants = order_participants(assertion.participants or [])
        if len(participants) < 2:
            continue

        person_files = resolve_participant_files(
            context, state, summary, persons_by_id, participants, "Marriage"
        )
        if len(person_files) < 2:
            continue

        spouse_a, spouse_b = person_files[0], person_files[1]
        link_a, link_b = wikilink_for_file(spouse_a), wikilink_for_file(spouse_b)

        date = assertion.text("date")
        place = assertion.text("place")
        place_link = None
        if place:
            place_link = wikilink_for_file(ensure_place_file(context, state, summary, place))

        relationship = ensure_relationship_file(
            context,
            state,
            summary,
            relationship_filename(spouse_a.basename, spouse_b.basename),
            "spouse",
            link_a,
            link_b,
            date=date,
            place=place_link,
        )
        state.record_target(assertion.id, "relationship", relationship)

        if date or place_link:
            event = ensure_event_file(
                context,
                state,
                summary,
                event_filename("marriage", spouse_a.basename, extract_year(date)),
                "marriage",
                [link_a, link_b],
                date=date,
                place=place_link,
            )
            state.record_target(assertion.id, "event", event)
