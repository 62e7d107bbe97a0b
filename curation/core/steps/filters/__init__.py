"""Filters: processing steps that decide per structure whether it is kept."""

from curation.core.steps.filters.atoms import AtomicNumberFilter, PseudoAtomFilter
from curation.core.steps.filters.base import Filter
from curation.core.steps.filters.properties import (
    ExternalIdChecker,
    HasPropertyFilter,
    PropertyChecker,
)
from curation.core.steps.filters.thresholds import (
    AtomCountFilter,
    BondCountFilter,
    BondOrderCountFilter,
    HeavyAtomCountFilter,
    MolecularMassFilter,
    ThresholdDirection,
    ThresholdFilter,
)
from curation.core.steps.filters.valences import ValenceFilter

__all__ = [
    "AtomCountFilter",
    "AtomicNumberFilter",
    "BondCountFilter",
    "BondOrderCountFilter",
    "ExternalIdChecker",
    "Filter",
    "HasPropertyFilter",
    "HeavyAtomCountFilter",
    "MolecularMassFilter",
    "PropertyChecker",
    "PseudoAtomFilter",
    "ThresholdDirection",
    "ThresholdFilter",
    "ValenceFilter",
]
