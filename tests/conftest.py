"""Shared fixtures for the curation tests."""

import pytest
from rdkit import Chem

from curation.core.records import assign_record_ids
from curation.reporting import AllowListReporter
from curation.valence import ValenceTable

HEADER = "AtomicNumber\tCharge\tPiBonds\tSigmaBonds\tMaxImplicitHydrogens"


@pytest.fixture
def mol_from_smiles():
    """Factory parsing a SMILES string, failing the test on parse errors."""

    def _parse(smiles: str) -> Chem.Mol:
        mol = Chem.MolFromSmiles(smiles)
        assert mol is not None, f"invalid test SMILES {smiles}"
        return mol

    return _parse


@pytest.fixture
def unsanitized_mol():
    """Factory for structures RDKit would reject during sanitization."""

    def _parse(smiles: str) -> Chem.Mol:
        mol = Chem.MolFromSmiles(smiles, sanitize=False)
        mol.UpdatePropertyCache(strict=False)
        Chem.GetSymmSSSR(mol)
        return mol

    return _parse


@pytest.fixture
def batch(mol_from_smiles):
    """Factory building a batch with record IDs assigned; None stays None."""

    def _build(*smiles):
        records = [None if s is None else mol_from_smiles(s) for s in smiles]
        assign_record_ids(records)
        return records

    return _build


@pytest.fixture
def collecting_reporter():
    """Factory for an initialized allow-list reporter."""

    def _create(*allowed):
        reporter = AllowListReporter(allowed)
        reporter.initialize()
        return reporter

    return _create


@pytest.fixture
def table_from_rows():
    """Factory building a valence table from row tuples."""

    def _build(*rows, **kwargs):
        lines = [HEADER] + ["\t".join(str(v) for v in row) for row in rows]
        return ValenceTable.from_lines(lines, **kwargs)

    return _build
