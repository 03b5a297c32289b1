"""Identity assertions: backfill a person's name and sex, then project the person."""

from lineage.projection.helpers import ensure_person_file
from lineage.projection.types import ProjectionContext, ProjectionState, ProjectionSummary
from lineage.session.model import Assertion, Person, Session


def apply_identity_details(person: Person, assertion: Assertion) -> Person:
    """Fill in name and sex from the assertion only where the person has none."""
    name = assertion.text("name")
    if not person.name and name:
        person.name = name
    sex = assertion.text("sex")
    if not person.sex and sex:
        person.sex = sex
    return person


def project_identity_assertions(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    assertions = [a for a in session.assertions if a.type == "identity"]
    if not assertions:
        return

    persons_by_id = session.persons_by_id()
    for assertion in assertions:
        for participant in assertion.participants or []:
            person = persons_by_id.get(participant.person_ref)
            if person is None:
                summary.errors.append(
                    f"Identity assertion references missing person {participant.person_ref}."
                )
                continue
            file = ensure_person_file(context, state, summary, apply_identity_details(person, assertion))
            state.record_target(assertion.id, "person", file)
