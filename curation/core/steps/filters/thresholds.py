"""
Threshold filters.

Each filter measures one quantity of a structure and compares it against an
inclusive threshold: with AT_MOST, structures above the threshold are
excluded; with AT_LEAST, structures below it. Both directions share a single
comparison, so a structure exactly at the threshold passes either way.
"""

from abc import abstractmethod
from enum import Enum
from typing import Optional, Union

from rdkit import Chem

from curation.core import chem
from curation.core.chem import MassFlavour
from curation.core.errors import ErrorCode, InvalidThresholdError
from curation.core.steps.filters.base import Filter
from curation.reporting import Reporter

Number = Union[int, float]


class ThresholdDirection(str, Enum):
    """Which side of the threshold a structure must be on to pass."""
    AT_MOST = "at_most"
    AT_LEAST = "at_least"


def _compare(value: Number, threshold: Number) -> int:
    return (value > threshold) - (value < threshold)


class ThresholdFilter(Filter):
    """Filter comparing a measured quantity against an inclusive threshold."""

    fatal_error_codes = frozenset({ErrorCode.INVALID_THRESHOLD})

    def __init__(
        self,
        threshold: Number,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        """
        Initialize the threshold filter.

        Args:
            threshold: Inclusive, non-negative threshold value.
            direction: AT_MOST keeps structures up to the threshold,
                AT_LEAST keeps structures from the threshold on.
            reporter: Reporter receiving the issues.
            external_id_property_name: Property holding an external identifier.

        Raises:
            InvalidThresholdError: If the threshold is negative.
        """
        super().__init__(reporter, external_id_property_name)
        _check_threshold(threshold)
        self.threshold = threshold
        self.direction = ThresholdDirection(direction)

    @abstractmethod
    def measure(self, mol: Chem.Mol) -> Number:
        """Compute the quantity compared against the threshold."""
        ...

    def is_excluded(self, mol: Chem.Mol) -> bool:
        _check_threshold(self.threshold)
        above = _compare(self.measure(mol), self.threshold)
        if self.direction == ThresholdDirection.AT_MOST:
            return above > 0
        # Mirror of the AT_MOST comparison
        return -above > 0

    def describe(self) -> str:
        return f"{super().describe()} ({self.direction.value} {self.threshold})"


def _check_threshold(threshold: Number) -> None:
    if threshold is None or threshold < 0:
        raise InvalidThresholdError(f"The threshold must be non-negative, got {threshold}.")


class AtomCountFilter(ThresholdFilter):
    """Filter by the number of atoms."""

    def __init__(
        self,
        threshold: int,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        consider_implicit_hydrogens: bool = True,
        consider_pseudo_atoms: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(threshold, direction, reporter, external_id_property_name)
        self.consider_implicit_hydrogens = consider_implicit_hydrogens
        self.consider_pseudo_atoms = consider_pseudo_atoms

    def measure(self, mol: Chem.Mol) -> int:
        return chem.atom_count(mol, self.consider_implicit_hydrogens, self.consider_pseudo_atoms)


class HeavyAtomCountFilter(ThresholdFilter):
    """Filter by the number of non-hydrogen atoms."""

    def __init__(
        self,
        threshold: int,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        consider_pseudo_atoms: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(threshold, direction, reporter, external_id_property_name)
        self.consider_pseudo_atoms = consider_pseudo_atoms

    def measure(self, mol: Chem.Mol) -> int:
        return chem.heavy_atom_count(mol, self.consider_pseudo_atoms)


class BondCountFilter(ThresholdFilter):
    """Filter by the number of bonds."""

    def __init__(
        self,
        threshold: int,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        consider_implicit_hydrogens: bool = True,
        consider_pseudo_atoms: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(threshold, direction, reporter, external_id_property_name)
        self.consider_implicit_hydrogens = consider_implicit_hydrogens
        self.consider_pseudo_atoms = consider_pseudo_atoms

    def measure(self, mol: Chem.Mol) -> int:
        return chem.bond_count(mol, self.consider_implicit_hydrogens, self.consider_pseudo_atoms)


class BondOrderCountFilter(ThresholdFilter):
    """
    Filter by the number of bonds of one bond order.

    Bonds to implicit hydrogens count as single bonds.
    """

    def __init__(
        self,
        bond_order: Chem.BondType,
        threshold: int,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        consider_implicit_hydrogens: bool = True,
        consider_pseudo_atoms: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        if bond_order is None:
            raise ValueError("The bond order must not be None.")
        super().__init__(threshold, direction, reporter, external_id_property_name)
        self.bond_order = bond_order
        self.consider_implicit_hydrogens = consider_implicit_hydrogens
        self.consider_pseudo_atoms = consider_pseudo_atoms

    def measure(self, mol: Chem.Mol) -> int:
        return chem.bond_order_count(
            mol,
            self.bond_order,
            self.consider_implicit_hydrogens,
            self.consider_pseudo_atoms,
        )


class MolecularMassFilter(ThresholdFilter):
    """Filter by molecular mass in Dalton."""

    def __init__(
        self,
        threshold: float,
        direction: ThresholdDirection = ThresholdDirection.AT_MOST,
        flavour: MassFlavour = MassFlavour.MOL_WEIGHT,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(threshold, direction, reporter, external_id_property_name)
        self.flavour = MassFlavour(flavour)

    def measure(self, mol: Chem.Mol) -> float:
        return chem.molecular_mass(mol, self.flavour)
