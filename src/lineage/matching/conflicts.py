"""Flag assertions of the same type that compete for the same person."""

from dataclasses import dataclass, field
from typing import Literal

from lineage.session.model import Assertion

Severity = Literal["high", "medium", "low"]


@dataclass
class Conflict:
    id: str
    type: str
    person_ref: str
    assertion_ids: list[str] = field(default_factory=list)
    severity: Severity = "low"


def classify_severity(assertion_type: str) -> Severity:
    normalized = assertion_type.lower()
    if normalized in ("birth", "death"):
        return "high"
    if normalized == "marriage":
        return "medium"
    return "low"


def detect_conflicts(assertions: list[Assertion]) -> list[Conflict]:
    """Group assertions by (participant, type) and report groups of two or more.

    Assertions without participants are ignored. Groups come back in order
    of first appearance; ids keep assertion order.
    """
    grouped: dict[tuple[str, str], list[str]] = {}
    for assertion in assertions:
        for participant in assertion.participants or []:
            key = (participant.person_ref, assertion.type)
            grouped.setdefault(key, []).append(assertion.id)

    return [
        Conflict(
            id=f"{person_ref}-{assertion_type}",
            type=assertion_type,
            person_ref=person_ref,
            assertion_ids=ids,
            severity=classify_severity(assertion_type),
        )
        for (person_ref, assertion_type), ids in grouped.items()
        if len(ids) >= 2
    ]
