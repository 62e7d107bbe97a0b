"""
Structure file loaders.

Provides import of SD and SMILES files into batches of RDKit structures.
"""

from curation.data.loaders.sdf import ImportResult, SDFConfig, SDFLoader, is_smiles_file

__all__ = [
    "ImportResult",
    "SDFConfig",
    "SDFLoader",
    "is_smiles_file",
]
