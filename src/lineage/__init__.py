"""Lineage research assistant.

Captures genealogical research sessions as structured notes and projects
their assertions into interlinked person, place, event, relationship,
source and citation records in a markdown vault.
"""

__version__ = "0.1.0"
