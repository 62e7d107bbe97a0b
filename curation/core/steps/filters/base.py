"""Base class of filters: processing steps that only drop structures."""

from abc import abstractmethod

from loguru import logger
from rdkit import Chem

from curation.core.errors import StructureNullError
from curation.core.records import get_record_id
from curation.core.steps.base import Batch, ProcessingStep
from curation.reporting import Reporter


class Filter(ProcessingStep):
    """
    Processing step deciding per structure whether it is kept.

    Filters never modify the structures they keep. An excluded structure is
    dropped silently unless the filter reports exclusions via on_excluded().
    """

    @abstractmethod
    def is_excluded(self, mol: Chem.Mol) -> bool:
        """
        Decide whether a structure is removed from the batch.

        Raises:
            CurationError: If the structure lacks information the decision needs.
        """
        ...

    def on_excluded(self, mol: Chem.Mol, reporter: Reporter) -> None:
        """Called for every excluded structure."""

    def _process(self, records: Batch, reporter: Reporter) -> Batch:
        passed: Batch = []
        for mol in records:
            try:
                if mol is None:
                    raise StructureNullError()
                excluded = self.is_excluded(mol)
            except Exception as e:
                self.report_issue(mol, e, reporter)
                continue

            if excluded:
                logger.debug(f"{self.describe()} excluded structure {get_record_id(mol)}")
                self.on_excluded(mol, reporter)
            else:
                passed.append(mol)
        return passed
