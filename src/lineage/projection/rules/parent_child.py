"""Parent-child assertions become a relationship with parent/child roles."""

from lineage.projection.helpers import (
    ensure_person_file,
    ensure_relationship_file,
    wikilink_for_file,
)
from lineage.projection.types import ProjectionContext, ProjectionState, ProjectionSummary
from lineage.session.model import Session
from lineage.utils.filename import parent_child_filename


def project_parent_child_assertions(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    session: Session,
) -> None:
    """Project ``parent_ref``/``child_ref`` pairs.

    References are re-checked here; a bad pair is reported as a summary
    error and skipped.
    """
    assertions = [a for a in session.assertions if a.type == "parent-child"]
    if not assertions:
        return

    persons_by_id = session.persons_by_id()
    for assertion in assertions:
        if not assertion.parent_ref or not assertion.child_ref:
            summary.errors.append(
                f"Parent-child assertion {assertion.id} requires parent_ref and child_ref."
            )
            continue
        if assertion.parent_ref == assertion.child_ref:
            summary.errors.append(
                f"Parent-child assertion {assertion.id} has the same parent and child."
            )
            continue

        parent = persons_by_id.get(assertion.parent_ref)
        child = persons_by_id.get(assertion.child_ref)
        if parent is None or child is None:
            summary.errors.append(
                f"Parent-child assertion {assertion.id} references missing person."
            )
            continue

        parent_file = ensure_person_file(context, state, summary, parent)
        child_file = ensure_person_file(context, state, summary, child)

        relationship = ensure_relationship_file(
            context,
            state,
            summary,
            parent_child_filename(parent_file.basename, child_file.basename),
            "parent-child",
            wikilink_for_file(parent_file),
            wikilink_for_file(child_file),
            person_a_role="parent",
            person_b_role="child",
        )
        state.record_target(assertion.id, "relationship", relationship)
