"""
Curation pipeline.

A pipeline is a processing step running an ordered sequence of child steps,
each consuming the output of the previous one. The pipeline wires its
children: they share its reporter and external ID property, and each child's
position is derived from the pipeline's own position and the child's index.
Pipelines nest; moving a pipeline into another renumbers all descendants.
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from curation.core.errors import ErrorCode
from curation.core.steps.base import Batch, ProcessingStep
from curation.data.loaders import SDFConfig, SDFLoader
from curation.reporting import ReportEntry, Reporter


class CurationPipeline(ProcessingStep):
    """
    Ordered composition of processing steps.

    Example:
        pipeline = (
            CurationPipeline(external_id_property_name="ID")
            .add_step(AtomicNumberFilter())
            .add_step(HeavyAtomCountFilter(50))
        )
        curated = pipeline.run_standalone(structures)
    """

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        external_id_property_name: Optional[str] = None,
    ):
        self._steps: list[ProcessingStep] = []
        super().__init__(reporter, external_id_property_name)

    @property
    def steps(self) -> tuple[ProcessingStep, ...]:
        """Child steps in execution order."""
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def add_step(self, step: ProcessingStep) -> "CurationPipeline":
        """
        Append a child step.

        The child takes over the pipeline's reporter and external ID property
        and gets the next position.

        Args:
            step: Step to append.

        Returns:
            The pipeline itself, for chaining.
        """
        if step is None:
            raise ValueError("The processing step must not be None.")
        if step is self or (isinstance(step, CurationPipeline) and step._contains(self)):
            raise ValueError("A pipeline cannot contain itself.")
        self._configure_child(step, len(self._steps))
        self._steps.append(step)
        return self

    def _contains(self, step: ProcessingStep) -> bool:
        for child in self._steps:
            if child is step:
                return True
            if isinstance(child, CurationPipeline) and child._contains(step):
                return True
        return False

    def clear(self) -> None:
        """Remove all child steps; removed steps become standalone again."""
        for step in self._steps:
            step.position = None
        self._steps.clear()

    def _child_position(self, index: int) -> str:
        if self.position is None:
            return str(index)
        return f"{self.position}.{index}"

    def _configure_child(self, step: ProcessingStep, index: int) -> None:
        step.external_id_property_name = self.external_id_property_name
        step.reporter = self.reporter
        step.position = self._child_position(index)

    def _propagate(self) -> None:
        for index, step in enumerate(self._steps):
            self._configure_child(step, index)

    def _process(self, records: Batch, reporter: Reporter) -> Batch:
        batch = records
        for step in self._steps:
            if not batch:
                logger.info(f"{self.describe()}: no structures left, skipping remaining steps")
                break
            try:
                batch = step.run(batch, reporter)
            except Exception as e:
                logger.error(f"{self.describe()}: step {step.describe()} failed fatally: {e!r}")
                raise
        return batch

    def import_and_process(
        self,
        path: Union[str, Path],
        loader: Optional[SDFLoader] = None,
    ) -> Batch:
        """
        Import a structure file and run the pipeline on it.

        Entries that cannot be parsed are reported as IMPORT_FAILED with
        their index in the file as record ID. The report is initialized and
        finalized like in run_standalone().

        Args:
            path: SD or SMILES file to import.
            loader: Loader to use; defaults to an SDFLoader with default settings.

        Returns:
            The structures that passed the pipeline.
        """
        if self.is_nested:
            raise RuntimeError("import_and_process() is only available on a top-level pipeline.")
        loader = loader or SDFLoader(SDFConfig())
        reporter = self.reporter
        reporter.initialize()

        try:
            imported = loader.load(path)
            for index in imported.failed_indices:
                reporter.append(
                    ReportEntry(
                        error_code=ErrorCode.IMPORT_FAILED,
                        step_type=type(self),
                        step_position=self.position,
                        record_id=str(index),
                    )
                )
            result = self.run(imported.records, reporter)
        except Exception as e:
            logger.error(f"{self.describe()} was interrupted by a fatal exception: {e!r}")
            self._finalize_after_fatal_exception(reporter)
            raise

        reporter.finalize()
        return result
