"""Data module for loading structure files."""

from curation.data import loaders

__all__ = ["loaders"]
