"""
Structure file loaders.

This module reads batches of structures from SD files and SMILES files.
Entries RDKit cannot parse are collected by index instead of aborting the
import, so that they can be reported as import failures.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union
import gzip

from loguru import logger
from rdkit import Chem

from curation.core.records import RECORD_ID_PROPERTY

SMILES_SUFFIXES = (".smi", ".smiles", ".txt")


@dataclass
class SDFConfig:
    """Configuration for structure file loading."""
    sanitize: bool = True
    remove_hs: bool = True
    strict_parsing: bool = True
    limit: Optional[int] = None
    # SMILES files: name of the property receiving the identifier column
    smiles_id_property: str = "ID"


@dataclass
class ImportResult:
    """
    Result of importing a structure file.

    Attributes:
        records: Parsed structures, record IDs set to their index in the file.
        failed_indices: Indices of the entries that could not be parsed.
        total: Number of entries read.
    """
    records: list[Chem.Mol] = field(default_factory=list)
    failed_indices: list[int] = field(default_factory=list)
    total: int = 0

    @property
    def success_rate(self) -> float:
        """Fraction of entries parsed successfully."""
        if self.total == 0:
            return 0.0
        return len(self.records) / self.total


def _open_binary(path: Path):
    if path.suffix == ".gz":
        return gzip.open(path, "rb")
    return open(path, "rb")


def _open_text(path: Path):
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def _perceive_leniently(mol: Optional[Chem.Mol]) -> Optional[Chem.Mol]:
    # Unsanitized structures still need hydrogen counts and ring information
    if mol is not None:
        mol.UpdatePropertyCache(strict=False)
        Chem.FastFindRings(mol)
    return mol


def is_smiles_file(path: Union[str, Path]) -> bool:
    """Guess from the file name whether a file holds SMILES lines."""
    path = Path(path)
    suffixes = path.suffixes[:-1] if path.suffix == ".gz" else path.suffixes
    return bool(suffixes) and suffixes[-1].lower() in SMILES_SUFFIXES


class SDFLoader:
    """
    Load structures from SD files (optionally gzipped) and SMILES files.

    Every structure gets its index in the file assigned as record ID, so
    IDs stay unique and failed entries keep their index as identifier.
    """

    def __init__(self, config: Optional[SDFConfig] = None):
        """Initialize the loader."""
        self.config = config or SDFConfig()

    def load(self, path: Union[str, Path]) -> ImportResult:
        """
        Load all structures of a file.

        Args:
            path: Path to an SD file or, judged by its suffix, a SMILES file.

        Returns:
            Parsed structures and the indices of failed entries.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Structure file not found: {path}")

        entries = self._iter_smiles(path) if is_smiles_file(path) else self._iter_sdf(path)
        result = ImportResult()
        for index, mol in entries:
            if not self.config.sanitize:
                mol = _perceive_leniently(mol)
            result.total += 1
            if mol is None:
                result.failed_indices.append(index)
                logger.warning(f"Could not parse entry {index} of {path}")
                continue
            mol.SetProp(RECORD_ID_PROPERTY, str(index))
            result.records.append(mol)

        logger.info(
            f"Imported {len(result.records)}/{result.total} structures from {path}"
            f" ({len(result.failed_indices)} failed)"
        )
        return result

    def _iter_sdf(self, path: Path) -> Iterator[tuple[int, Optional[Chem.Mol]]]:
        with _open_binary(path) as f:
            supplier = Chem.ForwardSDMolSupplier(
                f,
                sanitize=self.config.sanitize,
                removeHs=self.config.remove_hs,
                strictParsing=self.config.strict_parsing,
            )
            for index, mol in enumerate(supplier):
                if self.config.limit and index >= self.config.limit:
                    return
                yield index, mol

    def _iter_smiles(self, path: Path) -> Iterator[tuple[int, Optional[Chem.Mol]]]:
        index = 0
        with _open_text(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if self.config.limit and index >= self.config.limit:
                    return

                # Format: SMILES [identifier]
                parts = line.split(maxsplit=1)
                mol = Chem.MolFromSmiles(parts[0], sanitize=self.config.sanitize)
                if mol is not None and len(parts) > 1:
                    mol.SetProp(self.config.smiles_id_property, parts[1].strip())
                yield index, mol
                index += 1
