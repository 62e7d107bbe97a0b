"""
Record identity handling.

Structures flowing through a curation pipeline are plain RDKit molecules.
Each one carries a record identifier stored as a molecule property, assigned
once before the first processing step and never changed afterwards.
"""

from typing import Optional, Sequence

from rdkit import Chem

from curation.core.errors import CurationError, ErrorCode, MissingRecordIdError, StructureNullError

RECORD_ID_PROPERTY = "Curation_RecordID"
EXTERNAL_ID_PLACEHOLDER = "[no external ID]"


def assign_record_ids(records: Sequence[Optional[Chem.Mol]]) -> None:
    """
    Assign the position of every structure in the batch as its record ID.

    None entries keep their slot (and thus their index) but get no ID.

    Args:
        records: Batch of structures.
    """
    for index, mol in enumerate(records):
        if mol is not None:
            mol.SetProp(RECORD_ID_PROPERTY, str(index))


def has_record_id(mol: Chem.Mol) -> bool:
    """Check whether a structure has a record ID assigned."""
    if mol is None:
        raise StructureNullError()
    return mol.HasProp(RECORD_ID_PROPERTY) == 1


def get_record_id(mol: Chem.Mol) -> str:
    """
    Get the record ID of a structure.

    Raises:
        StructureNullError: If the structure is None.
        MissingRecordIdError: If no record ID has been assigned.
    """
    if not has_record_id(mol):
        raise MissingRecordIdError()
    return mol.GetProp(RECORD_ID_PROPERTY)


def get_record_ids(records: Sequence[Optional[Chem.Mol]]) -> list[str]:
    """Get the record IDs of all structures of a batch, in batch order."""
    record_ids = []
    for index, mol in enumerate(records):
        try:
            record_ids.append(get_record_id(mol))
        except MissingRecordIdError:
            raise MissingRecordIdError(f"Structure {index} of the batch has no record ID assigned.")
    return record_ids


def remove_record_ids(records: Sequence[Optional[Chem.Mol]]) -> None:
    """Remove the record ID property from every structure of a batch."""
    for mol in records:
        if mol is not None and mol.HasProp(RECORD_ID_PROPERTY):
            mol.ClearProp(RECORD_ID_PROPERTY)


def get_external_id(mol: Chem.Mol, property_name: str) -> str:
    """
    Get the external identifier of a structure.

    Args:
        mol: Structure to read from.
        property_name: Name of the property holding the external ID.

    Returns:
        The property value, or a placeholder if the property is unset or blank.
    """
    if mol is None:
        raise StructureNullError()
    if mol.HasProp(property_name):
        value = mol.GetProp(property_name)
        if value.strip():
            return value
    return EXTERNAL_ID_PLACEHOLDER


def clone_record(mol: Chem.Mol) -> Chem.Mol:
    """
    Deep-copy a structure including its properties.

    Raises:
        CurationError: With CLONE_ERROR if RDKit cannot copy the object.
    """
    try:
        return Chem.Mol(mol)
    except Exception as e:
        raise CurationError(ErrorCode.CLONE_ERROR, f"Structure could not be cloned: {e}") from e
