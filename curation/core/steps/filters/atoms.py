"""Filters judging the atoms of a structure."""

from typing import Optional

from rdkit import Chem

from curation.core import chem
from curation.core.steps.filters.base import Filter
from curation.reporting import Reporter


class AtomicNumberFilter(Filter):
    """
    Filter structures by the validity of their atomic numbers.

    By default, structures containing an atom whose atomic number is not a
    known element are excluded. With keep_invalid, only those structures are
    kept.
    """

    def __init__(
        self,
        wildcard_is_valid: bool = False,
        keep_invalid: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        """
        Initialize the atomic number filter.

        Args:
            wildcard_is_valid: Treat the wildcard atomic number 0 as valid.
            keep_invalid: Keep structures with invalid atomic numbers instead
                of excluding them.
        """
        super().__init__(reporter, external_id_property_name)
        self.wildcard_is_valid = wildcard_is_valid
        self.keep_invalid = keep_invalid

    def is_excluded(self, mol: Chem.Mol) -> bool:
        valid = chem.has_all_valid_atomic_numbers(mol, self.wildcard_is_valid)
        return valid if self.keep_invalid else not valid


class PseudoAtomFilter(Filter):
    """
    Filter structures by the presence of pseudo atoms (atomic number 0).

    By default, structures containing pseudo atoms are excluded. With
    keep_pseudo_atoms, only those structures are kept.
    """

    def __init__(
        self,
        keep_pseudo_atoms: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(reporter, external_id_property_name)
        self.keep_pseudo_atoms = keep_pseudo_atoms

    def is_excluded(self, mol: Chem.Mol) -> bool:
        contains = chem.contains_pseudo_atoms(mol)
        return not contains if self.keep_pseudo_atoms else contains
