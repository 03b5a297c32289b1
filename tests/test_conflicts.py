"""Tests for conflict detection between competing assertions."""

from lineage.matching.conflicts import classify_severity, detect_conflicts
from lineage.session.model import Assertion, Participant


def _assertion(assertion_id, assertion_type, *person_refs):
    return Assertion(
        id=assertion_id,
        type=assertion_type,
        participants=[Participant(person_ref=ref) for ref in person_refs],
    )


def test_two_births_for_one_person_conflict():
    """Two birth assertions for the same person form a high-severity conflict."""
    conflicts = detect_conflicts(
        [
            _assertion("a1", "birth", "p1"),
            _assertion("a2", "residence", "p1"),
            _assertion("a3", "birth", "p1"),
        ]
    )

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.id == "p1-birth"
    assert conflict.person_ref == "p1"
    assert conflict.assertion_ids == ["a1", "a3"]
    assert conflict.severity == "high"


def test_severity_by_type():
    assert classify_severity("Death") == "high"
    assert classify_severity("marriage") == "medium"
    assert classify_severity("residence") == "low"
    assert classify_severity("occupation") == "low"


def test_groups_in_first_appearance_order():
    conflicts = detect_conflicts(
        [
            _assertion("a1", "marriage", "p2", "p3"),
            _assertion("a2", "residence", "p1"),
            _assertion("a3", "marriage", "p2", "p4"),
            _assertion("a4", "residence", "p1"),
        ]
    )

    assert [c.id for c in conflicts] == ["p2-marriage", "p1-residence"]
    assert [c.severity for c in conflicts] == ["medium", "low"]


def test_no_conflicts():
    """Single assertions and assertions without participants never conflict."""
    assertions = [
        _assertion("a1", "birth", "p1"),
        _assertion("a2", "birth", "p2"),
        Assertion(id="a3", type="parent-child", parent_ref="p1", child_ref="p2"),
        Assertion(id="a4", type="parent-child", parent_ref="p1", child_ref="p3"),
    ]
    assert detect_conflicts(assertions) == []
