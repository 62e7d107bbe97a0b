"""Core curation modules: issue taxonomy, record handling, measurements and processing steps."""

from curation.core import chem, errors, records

__all__ = ["chem", "errors", "records"]
