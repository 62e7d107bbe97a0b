"""Filter judging the valences of the atoms of a structure."""

from typing import Optional

from rdkit import Chem

from curation.core.steps.filters.base import Filter
from curation.reporting import Reporter
from curation.valence import ValenceModel


class ValenceFilter(Filter):
    """
    Filter structures by the validity of their atom valences.

    Valences are checked against a valence model in the Kekulé form of the
    structure. Structures that cannot be kekulized, or that contain bonds
    of an unset or unsupported order, are reported and dropped.
    """

    def __init__(
        self,
        valence_model: Optional[ValenceModel] = None,
        wildcard_is_valid: bool = False,
        keep_invalid: bool = False,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        """
        Initialize the valence filter.

        Args:
            valence_model: Model to validate against; defaults to a model
                on the packaged valence list. Models may be shared.
            wildcard_is_valid: Treat atoms with atomic number 0 as valid.
            keep_invalid: Keep structures with invalid valences instead of
                excluding them.
        """
        super().__init__(reporter, external_id_property_name)
        self.valence_model = valence_model if valence_model is not None else ValenceModel()
        self.wildcard_is_valid = wildcard_is_valid
        self.keep_invalid = keep_invalid

    def is_excluded(self, mol: Chem.Mol) -> bool:
        valid = self.valence_model.has_all_valid_valences(mol, self.wildcard_is_valid)
        return valid if self.keep_invalid else not valid
