"""
Valence validation backed by a valence list.

An atom has a valid valence if its configuration matches one row of the
valence list: same element, formal charge, pi and sigma bond counts, and at
most the listed number of implicit hydrogens.
"""

from typing import Optional

from rdkit import Chem

from curation.core.chem import (
    WILDCARD_ATOMIC_NUMBER,
    AtomConfiguration,
    atom_configuration,
    kekulized_copy,
)
from curation.core.errors import AttributeNullError, ErrorCode, StructureNullError
from curation.valence.table import (
    ABSENT_POINTER,
    FORMAL_CHARGE,
    MAX_IMPLICIT_HYDROGENS,
    PI_BOND_COUNT,
    SIGMA_BOND_COUNT,
    ValenceTable,
)


class ValenceModel:
    """
    Judge atom configurations against a valence table.

    The model holds no state besides the (immutable) table, so one instance
    can be shared by any number of filters.
    """

    def __init__(self, table: Optional[ValenceTable] = None):
        """
        Initialize the valence model.

        Args:
            table: Valence table to validate against. Defaults to the
                valence list shipped with the package.
        """
        self.table = table if table is not None else ValenceTable.default()

    def is_valid(self, config: AtomConfiguration, wildcard_is_valid: bool = False) -> bool:
        """
        Check whether an atom configuration has a valid valence.

        Args:
            config: Configuration of the atom.
            wildcard_is_valid: Treat the wildcard atomic number (0) as valid.

        Returns:
            True if a matching valence list row exists.

        Raises:
            AttributeNullError: If a required attribute of the configuration is None.
        """
        if config.atomic_number is None:
            raise AttributeNullError(ErrorCode.ATOMIC_NUMBER_NULL)
        if config.formal_charge is None:
            raise AttributeNullError(ErrorCode.FORMAL_CHARGE_NULL)
        if config.implicit_hydrogen_count is None:
            raise AttributeNullError(ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL)
        if config.pi_bond_count is None or config.sigma_bond_count is None:
            raise AttributeNullError(ErrorCode.BOND_ORDER_UNSET)

        if wildcard_is_valid and config.atomic_number == WILDCARD_ATOMIC_NUMBER:
            return True

        start, count = self.table.group(config.atomic_number)
        if start == ABSENT_POINTER:
            return False

        for row in range(start, start + count):
            if (
                config.formal_charge == self.table.entry_at(row, FORMAL_CHARGE)
                and config.pi_bond_count == self.table.entry_at(row, PI_BOND_COUNT)
                and config.sigma_bond_count == self.table.entry_at(row, SIGMA_BOND_COUNT)
                and config.implicit_hydrogen_count <= self.table.entry_at(row, MAX_IMPLICIT_HYDROGENS)
            ):
                return True
        return False

    def is_valid_atom(self, atom: Chem.Atom, wildcard_is_valid: bool = False) -> bool:
        """
        Check the valence of an atom of a kekulized structure.

        Raises:
            AttributeNullError: If the atom is None or a bond order is unset/unsupported.
        """
        return self.is_valid(atom_configuration(atom), wildcard_is_valid)

    def has_all_valid_valences(self, mol: Chem.Mol, wildcard_is_valid: bool = False) -> bool:
        """
        Check whether every atom of a structure has a valid valence.

        Aromatic structures are validated in their Kekulé form; the given
        structure itself is not modified.

        Raises:
            StructureNullError: If the structure is None.
            CurationError: With KEKULIZATION_ERROR if no Kekulé form exists.
        """
        if mol is None:
            raise StructureNullError()
        kekulized = kekulized_copy(mol)
        return all(self.is_valid_atom(atom, wildcard_is_valid) for atom in kekulized.GetAtoms())
