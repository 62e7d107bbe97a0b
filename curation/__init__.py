"""
Structure Curation - validation and filtering of chemical structure collections.

This package provides composable processing steps and pipelines that filter
batches of RDKit structures, a valence list based valence model, and
reporters collecting every issue found along the way.
"""

__version__ = "0.1.0"
__author__ = "Structure Curation Contributors"
