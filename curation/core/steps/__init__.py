"""Processing steps, filters and the curation pipeline."""

from curation.core.steps.base import ProcessingStep
from curation.core.steps.filters import (
    AtomCountFilter,
    AtomicNumberFilter,
    BondCountFilter,
    BondOrderCountFilter,
    ExternalIdChecker,
    Filter,
    HasPropertyFilter,
    HeavyAtomCountFilter,
    MolecularMassFilter,
    PropertyChecker,
    PseudoAtomFilter,
    ThresholdDirection,
    ThresholdFilter,
    ValenceFilter,
)
from curation.core.steps.pipeline import CurationPipeline

__all__ = [
    "AtomCountFilter",
    "AtomicNumberFilter",
    "BondCountFilter",
    "BondOrderCountFilter",
    "CurationPipeline",
    "ExternalIdChecker",
    "Filter",
    "HasPropertyFilter",
    "HeavyAtomCountFilter",
    "MolecularMassFilter",
    "ProcessingStep",
    "PropertyChecker",
    "PseudoAtomFilter",
    "ThresholdDirection",
    "ThresholdFilter",
    "ValenceFilter",
]
