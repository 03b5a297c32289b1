"""Turn a validated research session into person, place, event,
relationship, source and citation records."""

from lineage.projection.engine import ProjectionEngine
from lineage.projection.types import ProjectionContext, ProjectionSummary

__all__ = ["ProjectionContext", "ProjectionEngine", "ProjectionSummary"]
