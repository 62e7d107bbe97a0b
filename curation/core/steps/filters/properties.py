"""
Filters checking structure properties.

HasPropertyFilter drops structures silently, like any filter.
PropertyChecker and its subclasses treat a missing property as an issue:
the structure is dropped and the checker's error code is reported.
"""

from typing import Optional

from rdkit import Chem

from curation.core.errors import ErrorCode
from curation.core.steps.filters.base import Filter
from curation.reporting import Reporter


def _has_property(mol: Chem.Mol, property_name: str) -> bool:
    return mol.HasProp(property_name) == 1


def _require_property_name(property_name: Optional[str]) -> str:
    if property_name is None or not property_name.strip():
        raise ValueError("The property name must be non-blank.")
    return property_name


class HasPropertyFilter(Filter):
    """
    Filter structures by the presence of a property.

    By default, structures lacking the property are excluded. With
    keep_missing, only those structures are kept.
    """

    def __init__(
        self,
        property_name: str,
        keep_missing: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        super().__init__(reporter, external_id_property_name)
        self.property_name = _require_property_name(property_name)
        self.keep_missing = keep_missing

    def is_excluded(self, mol: Chem.Mol) -> bool:
        present = _has_property(mol, self.property_name)
        return present if self.keep_missing else not present


class PropertyChecker(Filter):
    """Exclude and report structures lacking a required property."""

    def __init__(
        self,
        property_name: str,
        error_code: ErrorCode = ErrorCode.MISSING_PROPERTY,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        """
        Initialize the property checker.

        Args:
            property_name: Name of the required property.
            error_code: Code reported for structures lacking the property.
        """
        super().__init__(reporter, external_id_property_name)
        self._checked_property_name = _require_property_name(property_name)
        self.error_code = ErrorCode(error_code)

    @property
    def checked_property_name(self) -> str:
        """Name of the property the checker requires."""
        return self._checked_property_name

    def is_excluded(self, mol: Chem.Mol) -> bool:
        return not _has_property(mol, self.checked_property_name)

    def on_excluded(self, mol: Chem.Mol, reporter: Reporter) -> None:
        self.append_to_report(self.error_code, mol, reporter)


class ExternalIdChecker(PropertyChecker):
    """
    Exclude and report structures lacking their external identifier.

    The checked property is always the step's external ID property, so it
    follows the configuration pushed down by an enclosing pipeline.
    """

    def __init__(
        self,
        external_id_property_name: str,
        reporter: Optional[Reporter] = None,
    ):
        super().__init__(
            _require_property_name(external_id_property_name),
            ErrorCode.UNSET_EXTERNAL_ID,
            reporter,
            external_id_property_name,
        )

    @property
    def checked_property_name(self) -> str:
        return self.external_id_property_name

    @PropertyChecker.external_id_property_name.setter
    def external_id_property_name(self, name: Optional[str]) -> None:
        if name is None:
            raise ValueError("An external ID checker requires an external ID property name.")
        PropertyChecker.external_id_property_name.fset(self, name)
