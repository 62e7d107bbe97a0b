"""
Structure measurements used by the curation filters.

Thin helpers on top of RDKit that compute atom, bond and mass based
properties of a structure, translating RDKit's failure modes into error
codes of the curation taxonomy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rdkit import Chem
from rdkit.Chem import Descriptors

from curation.core.errors import AttributeNullError, CurationError, ErrorCode, StructureNullError

WILDCARD_ATOMIC_NUMBER = 0
HIGHEST_KNOWN_ATOMIC_NUMBER = 118  # Oganesson

# Number of pi bonds contributed by a bond of the given type (Kekulé form)
PI_BONDS_PER_BOND_TYPE: dict[Chem.BondType, int] = {
    Chem.BondType.SINGLE: 0,
    Chem.BondType.DOUBLE: 1,
    Chem.BondType.TRIPLE: 2,
    Chem.BondType.QUADRUPLE: 3,
    Chem.BondType.QUINTUPLE: 4,
    Chem.BondType.HEXTUPLE: 5,
}


class MassFlavour(str, Enum):
    """Ways to compute the mass of a structure."""
    MOL_WEIGHT = "mol_weight"  # Average weight, specified isotopes respected
    MOL_WEIGHT_IGNORE_SPECIFIED = "mol_weight_ignore_specified"  # Average weight, isotopes ignored
    MONO_ISOTOPIC = "mono_isotopic"  # Exact mass of the most abundant isotopes


@dataclass(frozen=True)
class AtomConfiguration:
    """
    Valence-relevant description of a single atom.

    Attributes:
        atomic_number: Element number (0 for wildcard / pseudo atoms).
        formal_charge: Formal charge of the atom.
        pi_bond_count: Sum of (bond order - 1) over all bonds of the atom.
        sigma_bond_count: Number of bonds including those to implicit hydrogens.
        implicit_hydrogen_count: Number of hydrogens not present as atoms.
    """
    atomic_number: Optional[int]
    formal_charge: Optional[int]
    pi_bond_count: Optional[int]
    sigma_bond_count: Optional[int]
    implicit_hydrogen_count: Optional[int]


def _require_structure(mol: Chem.Mol) -> Chem.Mol:
    if mol is None:
        raise StructureNullError()
    return mol


def is_pseudo_atom(atom: Chem.Atom) -> bool:
    """Check whether an atom is a pseudo (dummy / R-group) atom."""
    return atom.GetAtomicNum() == WILDCARD_ATOMIC_NUMBER


def contains_pseudo_atoms(mol: Chem.Mol) -> bool:
    """Check whether a structure contains at least one pseudo atom."""
    _require_structure(mol)
    return any(is_pseudo_atom(atom) for atom in mol.GetAtoms())


def implicit_hydrogen_count(atom: Chem.Atom) -> int:
    """
    Get the number of hydrogens attached to an atom that are not graph atoms.

    Raises:
        AttributeNullError: If RDKit has not perceived the hydrogen count
            (e.g. for structures that were never sanitized).
    """
    try:
        return atom.GetTotalNumHs()
    except RuntimeError as e:
        raise AttributeNullError(
            ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL,
            f"Implicit hydrogen count of atom {atom.GetIdx()} is unknown: {e}",
        ) from e


def total_implicit_hydrogen_count(mol: Chem.Mol, consider_pseudo_atoms: bool = True) -> int:
    """Sum the implicit hydrogen counts of all (optionally non-pseudo) atoms."""
    _require_structure(mol)
    return sum(
        implicit_hydrogen_count(atom)
        for atom in mol.GetAtoms()
        if consider_pseudo_atoms or not is_pseudo_atom(atom)
    )


def atom_count(
    mol: Chem.Mol,
    consider_implicit_hydrogens: bool = True,
    consider_pseudo_atoms: bool = False,
) -> int:
    """
    Count the atoms of a structure.

    Args:
        mol: Structure to measure.
        consider_implicit_hydrogens: Add implicit hydrogens to the count.
        consider_pseudo_atoms: Count pseudo atoms.

    Returns:
        Number of atoms.
    """
    _require_structure(mol)
    count = sum(
        1 for atom in mol.GetAtoms()
        if consider_pseudo_atoms or not is_pseudo_atom(atom)
    )
    if consider_implicit_hydrogens:
        count += total_implicit_hydrogen_count(mol, consider_pseudo_atoms)
    return count


def heavy_atom_count(mol: Chem.Mol, consider_pseudo_atoms: bool = False) -> int:
    """Count all non-hydrogen atoms of a structure."""
    _require_structure(mol)
    return sum(
        1 for atom in mol.GetAtoms()
        if atom.GetAtomicNum() != 1 and (consider_pseudo_atoms or not is_pseudo_atom(atom))
    )


def _involves_pseudo_atom(bond: Chem.Bond) -> bool:
    return is_pseudo_atom(bond.GetBeginAtom()) or is_pseudo_atom(bond.GetEndAtom())


def bond_count(
    mol: Chem.Mol,
    consider_implicit_hydrogens: bool = True,
    consider_pseudo_atoms: bool = False,
) -> int:
    """
    Count the bonds of a structure.

    Bonds to implicit hydrogens are counted once per hydrogen. Bonds to
    pseudo atoms are skipped unless consider_pseudo_atoms is set.
    """
    _require_structure(mol)
    count = sum(
        1 for bond in mol.GetBonds()
        if consider_pseudo_atoms or not _involves_pseudo_atom(bond)
    )
    if consider_implicit_hydrogens:
        count += total_implicit_hydrogen_count(mol, consider_pseudo_atoms)
    return count


def bond_order_count(
    mol: Chem.Mol,
    bond_order: Chem.BondType,
    consider_implicit_hydrogens: bool = True,
    consider_pseudo_atoms: bool = False,
) -> int:
    """
    Count the bonds of a specific order.

    Implicit hydrogens contribute single bonds.
    """
    _require_structure(mol)
    count = sum(
        1 for bond in mol.GetBonds()
        if bond.GetBondType() == bond_order
        and (consider_pseudo_atoms or not _involves_pseudo_atom(bond))
    )
    if bond_order == Chem.BondType.SINGLE and consider_implicit_hydrogens:
        count += total_implicit_hydrogen_count(mol, consider_pseudo_atoms)
    return count


def _compute_mass(mol: Chem.Mol, flavour: MassFlavour) -> float:
    if flavour == MassFlavour.MOL_WEIGHT:
        return Descriptors.MolWt(mol)
    if flavour == MassFlavour.MOL_WEIGHT_IGNORE_SPECIFIED:
        unlabelled = Chem.Mol(mol)
        for atom in unlabelled.GetAtoms():
            atom.SetIsotope(0)
        return Descriptors.MolWt(unlabelled)
    if flavour == MassFlavour.MONO_ISOTOPIC:
        return Descriptors.ExactMolWt(mol)
    raise ValueError(f"Unknown mass flavour: {flavour}")


def molecular_mass(mol: Chem.Mol, flavour: MassFlavour = MassFlavour.MOL_WEIGHT) -> float:
    """
    Compute the mass of a structure.

    Args:
        mol: Structure to measure.
        flavour: Mass computation flavour.

    Returns:
        Mass in Dalton.

    Raises:
        AttributeNullError: If RDKit has not perceived the implicit
            hydrogen counts the mass includes.
    """
    _require_structure(mol)
    try:
        return _compute_mass(mol, flavour)
    except RuntimeError as e:
        raise AttributeNullError(
            ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL,
            f"Implicit hydrogen counts are unknown: {e}",
        ) from e


def has_valid_atomic_number(atom: Chem.Atom, wildcard_is_valid: bool = False) -> bool:
    """Check whether the atomic number of an atom is a known element."""
    atomic_number = atom.GetAtomicNum()
    if atomic_number == WILDCARD_ATOMIC_NUMBER:
        return wildcard_is_valid
    return 0 < atomic_number <= HIGHEST_KNOWN_ATOMIC_NUMBER


def has_all_valid_atomic_numbers(mol: Chem.Mol, wildcard_is_valid: bool = False) -> bool:
    """Check whether every atom of a structure has a valid atomic number."""
    _require_structure(mol)
    return all(has_valid_atomic_number(atom, wildcard_is_valid) for atom in mol.GetAtoms())


def kekulized_copy(mol: Chem.Mol) -> Chem.Mol:
    """
    Get a copy of a structure with aromatic bonds replaced by single/double bonds.

    Raises:
        CurationError: With KEKULIZATION_ERROR if RDKit cannot kekulize the copy.
    """
    _require_structure(mol)
    copy = Chem.Mol(mol)
    try:
        Chem.Kekulize(copy, clearAromaticFlags=True)
    except Chem.KekulizeException as e:
        raise CurationError(ErrorCode.KEKULIZATION_ERROR, str(e)) from e
    return copy


def sigma_and_pi_bond_counts(atom: Chem.Atom, consider_implicit_hydrogens: bool = True) -> tuple[int, int]:
    """
    Count the sigma and pi bonds of an atom.

    The atom must belong to a kekulized structure; aromatic bonds are
    reported as an unknown bond order.

    Returns:
        Tuple of (sigma bond count, pi bond count).

    Raises:
        AttributeNullError: If a bond order is unset or not supported.
    """
    sigma_count = 0
    pi_count = 0
    for bond in atom.GetBonds():
        bond_type = bond.GetBondType()
        if bond_type == Chem.BondType.UNSPECIFIED:
            raise AttributeNullError(ErrorCode.BOND_ORDER_UNSET)
        if bond_type not in PI_BONDS_PER_BOND_TYPE:
            raise AttributeNullError(
                ErrorCode.BOND_ORDER_UNKNOWN,
                f"Unsupported bond type {bond_type} at bond {bond.GetIdx()}",
            )
        sigma_count += 1
        pi_count += PI_BONDS_PER_BOND_TYPE[bond_type]
    if consider_implicit_hydrogens:
        sigma_count += implicit_hydrogen_count(atom)
    return sigma_count, pi_count


def atom_configuration(atom: Chem.Atom) -> AtomConfiguration:
    """Describe an atom of a kekulized structure for valence validation."""
    if atom is None:
        raise AttributeNullError(ErrorCode.ATOM_NULL)
    sigma_count, pi_count = sigma_and_pi_bond_counts(atom)
    return AtomConfiguration(
        atomic_number=atom.GetAtomicNum(),
        formal_charge=atom.GetFormalCharge(),
        pi_bond_count=pi_count,
        sigma_bond_count=sigma_count,
        implicit_hydrogen_count=implicit_hydrogen_count(atom),
    )
