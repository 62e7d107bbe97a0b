"""
Valence validation module.

Provides the indexed valence list and the valence model that checks atom
configurations against it.
"""

from curation.valence.model import ValenceModel
from curation.valence.table import ABSENT_POINTER, ValenceTable

__all__ = [
    "ABSENT_POINTER",
    "ValenceModel",
    "ValenceTable",
]
