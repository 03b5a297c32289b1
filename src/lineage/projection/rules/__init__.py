"""Projection rules, one module per assertion family.

``PROJECTION_RULES`` is the order the engine runs them in; citations must
stay last because it reads the targets every earlier rule recorded.
"""

from lineage.projection.rules.birth_death import project_birth_death_assertions
from lineage.projection.rules.citations import project_citations
from lineage.projection.rules.identity import project_identity_assertions
from lineage.projection.rules.marriage import project_marriage_assertions
from lineage.projection.rules.parent_child import project_parent_child_assertions
from lineage.projection.rules.residence import project_residence_assertions

PROJECTION_RULES = (
    project_identity_assertions,
    project_birth_death_assertions,
    project_marriage_assertions,
    project_parent_child_assertions,
    project_residence_assertions,
    project_citations,
)

__all__ = [
    "PROJECTION_RULES",
    "project_birth_death_assertions",
    "project_citations",
    "project_identity_assertions",
    "project_marriage_assertions",
    "project_parent_child_assertions",
    "project_residence_assertions",
]
