"""
Configuration management for structure curation.

This module provides Pydantic models describing a curation run (reporter,
valence list, import settings and the ordered processing steps) and the
factories turning such a configuration into a runnable pipeline.
"""

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from rdkit import Chem

from curation.core.chem import HIGHEST_KNOWN_ATOMIC_NUMBER, MassFlavour
from curation.core.errors import ErrorCode
from curation.core.steps import (
    AtomCountFilter,
    AtomicNumberFilter,
    BondCountFilter,
    BondOrderCountFilter,
    CurationPipeline,
    ExternalIdChecker,
    HasPropertyFilter,
    HeavyAtomCountFilter,
    MolecularMassFilter,
    ProcessingStep,
    PropertyChecker,
    PseudoAtomFilter,
    ThresholdDirection,
    ValenceFilter,
)
from curation.data.loaders import SDFConfig, SDFLoader
from curation.reporting import AllowListReporter, MarkdownReporter, Reporter, SortProperty
from curation.valence import ValenceModel, ValenceTable

BOND_ORDERS: dict[str, Chem.BondType] = {
    "single": Chem.BondType.SINGLE,
    "double": Chem.BondType.DOUBLE,
    "triple": Chem.BondType.TRIPLE,
    "quadruple": Chem.BondType.QUADRUPLE,
    "aromatic": Chem.BondType.AROMATIC,
}


class ReporterConfig(BaseModel):
    """Reporter configuration."""

    kind: Literal["markdown", "allow-list"] = Field(
        default="markdown",
        description="Reporter implementation",
    )
    output_dir: Path = Field(
        default=Path("Processing_Reports"),
        description="Directory markdown reports are written to",
    )
    sort_by: SortProperty = Field(
        default=SortProperty.STEP_POSITION,
        description="Ordering of the report entries",
    )
    allowed_error_codes: list[ErrorCode] = Field(
        default_factory=list,
        description="Error codes accepted by the allow-list reporter",
    )


class ValenceListConfig(BaseModel):
    """Valence list configuration."""

    path: Optional[Path] = Field(
        default=None,
        description="Valence list file (None = list shipped with the package)",
    )
    max_atomic_number: int = Field(
        default=HIGHEST_KNOWN_ATOMIC_NUMBER,
        ge=1,
        le=HIGHEST_KNOWN_ATOMIC_NUMBER,
        description="Highest atomic number the valence list may contain",
    )
    expected_row_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of data rows the valence list must contain",
    )


class ImportConfig(BaseModel):
    """Structure file import configuration."""

    sanitize: bool = Field(default=True)
    remove_hs: bool = Field(default=True)
    strict_parsing: bool = Field(default=True)
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum structures to import (None = all)",
    )
    smiles_id_property: str = Field(
        default="ID",
        min_length=1,
        description="Property receiving the identifier column of SMILES files",
    )


class _CountThreshold(BaseModel):
    threshold: int = Field(..., ge=0, description="Inclusive threshold")
    direction: ThresholdDirection = Field(default=ThresholdDirection.AT_MOST)


class AtomCountStepConfig(_CountThreshold):
    kind: Literal["atom_count"] = "atom_count"
    consider_implicit_hydrogens: bool = True
    consider_pseudo_atoms: bool = False


class HeavyAtomCountStepConfig(_CountThreshold):
    kind: Literal["heavy_atom_count"] = "heavy_atom_count"
    consider_pseudo_atoms: bool = False


class BondCountStepConfig(_CountThreshold):
    kind: Literal["bond_count"] = "bond_count"
    consider_implicit_hydrogens: bool = True
    consider_pseudo_atoms: bool = False


class BondOrderCountStepConfig(_CountThreshold):
    kind: Literal["bond_order_count"] = "bond_order_count"
    bond_order: Literal["single", "double", "triple", "quadruple", "aromatic"] = "single"
    consider_implicit_hydrogens: bool = True
    consider_pseudo_atoms: bool = False


class MolecularMassStepConfig(BaseModel):
    kind: Literal["molecular_mass"] = "molecular_mass"
    threshold: float = Field(..., ge=0.0, description="Inclusive threshold in Dalton")
    direction: ThresholdDirection = Field(default=ThresholdDirection.AT_MOST)
    flavour: MassFlavour = Field(default=MassFlavour.MOL_WEIGHT)


class AtomicNumbersStepConfig(BaseModel):
    kind: Literal["atomic_numbers"] = "atomic_numbers"
    wildcard_is_valid: bool = False
    keep_invalid: bool = False


class PseudoAtomsStepConfig(BaseModel):
    kind: Literal["pseudo_atoms"] = "pseudo_atoms"
    keep_pseudo_atoms: bool = False


class ValencesStepConfig(BaseModel):
    kind: Literal["valences"] = "valences"
    wildcard_is_valid: bool = False
    keep_invalid: bool = False


class HasPropertyStepConfig(BaseModel):
    kind: Literal["has_property"] = "has_property"
    property_name: str = Field(..., min_length=1)
    keep_missing: bool = False


class PropertyCheckerStepConfig(BaseModel):
    kind: Literal["property_checker"] = "property_checker"
    property_name: str = Field(..., min_length=1)
    error_code: ErrorCode = ErrorCode.MISSING_PROPERTY


class ExternalIdCheckerStepConfig(BaseModel):
    kind: Literal["external_id_checker"] = "external_id_checker"


class PipelineStepConfig(BaseModel):
    """Nested pipeline."""

    kind: Literal["pipeline"] = "pipeline"
    steps: list["StepConfig"] = Field(default_factory=list)


StepConfig = Annotated[
    Union[
        AtomCountStepConfig,
        HeavyAtomCountStepConfig,
        BondCountStepConfig,
        BondOrderCountStepConfig,
        MolecularMassStepConfig,
        AtomicNumbersStepConfig,
        PseudoAtomsStepConfig,
        ValencesStepConfig,
        HasPropertyStepConfig,
        PropertyCheckerStepConfig,
        ExternalIdCheckerStepConfig,
        PipelineStepConfig,
    ],
    Field(discriminator="kind"),
]

PipelineStepConfig.model_rebuild()


class CurationConfig(BaseModel):
    """Complete curation run configuration."""

    name: str = Field(
        default="curation",
        min_length=1,
        max_length=100,
        description="Name of the curation run",
    )
    description: Optional[str] = Field(
        default=None,
        description="Optional description",
    )
    external_id_property: Optional[str] = Field(
        default=None,
        description="Structure property holding an external identifier",
    )
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    valence_list: ValenceListConfig = Field(default_factory=ValenceListConfig)
    input: ImportConfig = Field(default_factory=ImportConfig)
    steps: list[StepConfig] = Field(default_factory=list)

    @field_validator("external_id_property")
    @classmethod
    def validate_external_id_property(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the property name is not blank."""
        if v is not None and not v.strip():
            raise ValueError("external_id_property must be non-blank")
        return v

    @classmethod
    def from_yaml(cls, path: Path) -> "CurationConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


def build_reporter(config: ReporterConfig) -> Reporter:
    """Create the reporter described by a configuration."""
    if config.kind == "allow-list":
        return AllowListReporter(config.allowed_error_codes)
    return MarkdownReporter(config.output_dir, config.sort_by)


def build_valence_model(config: ValenceListConfig) -> ValenceModel:
    """Create a valence model on the configured valence list."""
    if config.path is None:
        return ValenceModel(ValenceTable.default())
    table = ValenceTable.from_file(
        config.path,
        max_atomic_number=config.max_atomic_number,
        expected_row_count=config.expected_row_count,
    )
    return ValenceModel(table)


def build_loader(config: ImportConfig) -> SDFLoader:
    """Create a structure file loader."""
    return SDFLoader(SDFConfig(**config.model_dump()))


def build_step(
    step_config: BaseModel,
    valence_model: Optional[ValenceModel] = None,
    external_id_property: Optional[str] = None,
) -> ProcessingStep:
    """
    Create the processing step described by a step configuration.

    Args:
        step_config: One of the step configuration models.
        valence_model: Model shared by all valence filters; built from the
            packaged valence list on demand.
        external_id_property: External ID property of the enclosing run.

    Returns:
        Processing step; add it to a pipeline to configure its reporter
        and position.

    Raises:
        ValueError: If an external ID checker is configured without an
            external ID property.
    """
    if isinstance(step_config, AtomCountStepConfig):
        return AtomCountFilter(
            step_config.threshold,
            step_config.direction,
            step_config.consider_implicit_hydrogens,
            step_config.consider_pseudo_atoms,
        )
    if isinstance(step_config, HeavyAtomCountStepConfig):
        return HeavyAtomCountFilter(
            step_config.threshold,
            step_config.direction,
            step_config.consider_pseudo_atoms,
        )
    if isinstance(step_config, BondCountStepConfig):
        return BondCountFilter(
            step_config.threshold,
            step_config.direction,
            step_config.consider_implicit_hydrogens,
            step_config.consider_pseudo_atoms,
        )
    if isinstance(step_config, BondOrderCountStepConfig):
        return BondOrderCountFilter(
            BOND_ORDERS[step_config.bond_order],
            step_config.threshold,
            step_config.direction,
            step_config.consider_implicit_hydrogens,
            step_config.consider_pseudo_atoms,
        )
    if isinstance(step_config, MolecularMassStepConfig):
        return MolecularMassFilter(step_config.threshold, step_config.direction, step_config.flavour)
    if isinstance(step_config, AtomicNumbersStepConfig):
        return AtomicNumberFilter(step_config.wildcard_is_valid, step_config.keep_invalid)
    if isinstance(step_config, PseudoAtomsStepConfig):
        return PseudoAtomFilter(step_config.keep_pseudo_atoms)
    if isinstance(step_config, ValencesStepConfig):
        return ValenceFilter(
            valence_model if valence_model is not None else ValenceModel(),
            step_config.wildcard_is_valid,
            step_config.keep_invalid,
        )
    if isinstance(step_config, HasPropertyStepConfig):
        return HasPropertyFilter(step_config.property_name, step_config.keep_missing)
    if isinstance(step_config, PropertyCheckerStepConfig):
        return PropertyChecker(step_config.property_name, step_config.error_code)
    if isinstance(step_config, ExternalIdCheckerStepConfig):
        if external_id_property is None:
            raise ValueError("external_id_checker steps require external_id_property to be set")
        return ExternalIdChecker(external_id_property)
    if isinstance(step_config, PipelineStepConfig):
        pipeline = CurationPipeline(external_id_property_name=external_id_property)
        for child in step_config.steps:
            pipeline.add_step(build_step(child, valence_model, external_id_property))
        return pipeline
    raise ValueError(f"Unknown step configuration: {type(step_config).__name__}")


def _uses_valences(steps: list) -> bool:
    for step in steps:
        if isinstance(step, ValencesStepConfig):
            return True
        if isinstance(step, PipelineStepConfig) and _uses_valences(step.steps):
            return True
    return False


def build_pipeline(config: CurationConfig) -> CurationPipeline:
    """
    Create the top-level pipeline of a curation run.

    The valence list is loaded once and shared by all valence filters.
    """
    valence_model = build_valence_model(config.valence_list) if _uses_valences(config.steps) else None
    pipeline = CurationPipeline(build_reporter(config.reporter), config.external_id_property)
    for step_config in config.steps:
        pipeline.add_step(build_step(step_config, valence_model, config.external_id_property))
    return pipeline


# Pre-configured step sequences
PIPELINE_PRESETS: dict[str, list[dict]] = {
    "structure-validity": [
        {"kind": "atomic_numbers"},
        {"kind": "pseudo_atoms"},
        {"kind": "valences"},
    ],
    "drug-like": [
        {"kind": "atomic_numbers"},
        {"kind": "pseudo_atoms"},
        {"kind": "valences"},
        {"kind": "heavy_atom_count", "threshold": 5, "direction": "at_least"},
        {"kind": "heavy_atom_count", "threshold": 70, "direction": "at_most"},
        {"kind": "molecular_mass", "threshold": 900.0, "direction": "at_most"},
    ],
    "fragments": [
        {"kind": "atomic_numbers"},
        {"kind": "valences"},
        {"kind": "heavy_atom_count", "threshold": 20, "direction": "at_most"},
        {"kind": "molecular_mass", "threshold": 300.0, "direction": "at_most"},
    ],
}


def get_preset(name: str) -> Optional[list[dict]]:
    """Get the step configurations of a preset."""
    preset = PIPELINE_PRESETS.get(name.lower())
    return [dict(step) for step in preset] if preset is not None else None
