"""Tests for the concrete filters."""

import pytest
from rdkit import Chem

from curation.core.chem import MassFlavour
from curation.core.errors import ErrorCode, InvalidThresholdError
from curation.core.records import get_record_id
from curation.core.steps import (
    AtomCountFilter,
    AtomicNumberFilter,
    BondCountFilter,
    BondOrderCountFilter,
    ExternalIdChecker,
    HasPropertyFilter,
    HeavyAtomCountFilter,
    MolecularMassFilter,
    PropertyChecker,
    PseudoAtomFilter,
    ThresholdDirection,
    ValenceFilter,
)
from curation.valence import ValenceModel

AT_MOST = ThresholdDirection.AT_MOST
AT_LEAST = ThresholdDirection.AT_LEAST

# Linear alkanes by heavy atom count
ALKANES = {n: "C" * n for n in range(1, 12)}


def ids(records):
    return [get_record_id(m) for m in records]


class TestThresholdFilter:
    """Tests for threshold semantics shared by all threshold filters."""

    def test_max_count_example(self, batch, collecting_reporter):
        """Test that an at-most filter keeps records up to the threshold, in order."""
        records = batch(ALKANES[4], ALKANES[6], ALKANES[9])
        result = HeavyAtomCountFilter(6, AT_MOST).run(records, collecting_reporter())

        assert result == records[:2]

    @pytest.mark.parametrize("threshold", [0, 1, 5, 10])
    def test_inclusive_boundaries(self, mol_from_smiles, threshold):
        """Test that both directions pass a structure exactly at the threshold."""
        at_most = HeavyAtomCountFilter(threshold, AT_MOST)
        at_least = HeavyAtomCountFilter(threshold, AT_LEAST)

        if threshold > 0:
            exact = mol_from_smiles(ALKANES[threshold])
            assert not at_most.is_excluded(exact)
            assert not at_least.is_excluded(exact)
            below = mol_from_smiles(ALKANES[threshold - 1]) if threshold > 1 else Chem.Mol()
            assert at_least.is_excluded(below)
            assert not at_most.is_excluded(below)

        above = mol_from_smiles(ALKANES[threshold + 1])
        assert at_most.is_excluded(above)
        assert not at_least.is_excluded(above)

    def test_directions_are_mirrored(self, mol_from_smiles):
        """Test that off-threshold structures are excluded by exactly one direction."""
        for n in range(1, 12):
            if n == 6:
                continue
            mol = mol_from_smiles(ALKANES[n])
            at_most = HeavyAtomCountFilter(6, AT_MOST).is_excluded(mol)
            at_least = HeavyAtomCountFilter(6, AT_LEAST).is_excluded(mol)
            assert at_least == (not at_most)

    def test_negative_threshold(self):
        """Test that negative thresholds are rejected on construction."""
        with pytest.raises(InvalidThresholdError):
            HeavyAtomCountFilter(-1)
        with pytest.raises(InvalidThresholdError):
            MolecularMassFilter(-0.5, AT_LEAST)

    def test_direction_from_string(self):
        """Test that directions may be given by value."""
        assert HeavyAtomCountFilter(3, "at_least").direction is AT_LEAST

    @pytest.mark.parametrize(
        "step",
        [
            AtomCountFilter(100),
            BondCountFilter(100),
            MolecularMassFilter(1000.0),
            MolecularMassFilter(1000.0, flavour=MassFlavour.MOL_WEIGHT_IGNORE_SPECIFIED),
            MolecularMassFilter(1000.0, flavour=MassFlavour.MONO_ISOTOPIC),
        ],
        ids=lambda step: f"{type(step).__name__}-{getattr(step, 'flavour', '')}",
    )
    def test_unperceived_hydrogens_drop_only_the_structure(self, batch, step, collecting_reporter):
        """Test that structures without perceived implicit hydrogens are dropped and reported."""
        records = batch("C", "CC")
        records[0] = Chem.MolFromSmiles("CCO", sanitize=False)
        records[0].SetProp("Curation_RecordID", "0")
        reporter = collecting_reporter(ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL)

        result = step.run(records, reporter)

        assert ids(result) == ["1"]
        assert reporter.reported_codes == [ErrorCode.IMPLICIT_HYDROGEN_COUNT_NULL]

    def test_null_structures_are_reported(self, batch, collecting_reporter):
        """Test that None entries are dropped and reported."""
        reporter = collecting_reporter(ErrorCode.STRUCTURE_NULL)
        result = HeavyAtomCountFilter(10).run(batch("CC", None, "CCC"), reporter)

        assert ids(result) == ["0", "2"]
        assert reporter.allowed_count == 1
        assert reporter.not_allowed_count == 0


class TestCountFilters:
    """Tests for the individual count measurements."""

    def test_atom_count(self, mol_from_smiles):
        """Test counting with and without implicit hydrogens."""
        ethanol = mol_from_smiles("CCO")
        assert not AtomCountFilter(9).is_excluded(ethanol)
        assert AtomCountFilter(8).is_excluded(ethanol)
        assert not AtomCountFilter(3, consider_implicit_hydrogens=False).is_excluded(ethanol)

    def test_atom_count_pseudo_atoms(self, mol_from_smiles):
        """Test that pseudo atoms count only on request."""
        mol = mol_from_smiles("*CC")
        assert not AtomCountFilter(2, consider_implicit_hydrogens=False).is_excluded(mol)
        assert AtomCountFilter(
            2, consider_implicit_hydrogens=False, consider_pseudo_atoms=True
        ).is_excluded(mol)

    def test_bond_count(self, mol_from_smiles):
        """Test bond counting."""
        ethanol = mol_from_smiles("CCO")
        assert not BondCountFilter(8).is_excluded(ethanol)
        assert BondCountFilter(2, AT_LEAST, consider_implicit_hydrogens=False).is_excluded(
            mol_from_smiles("C")
        )

    def test_bond_order_count(self, mol_from_smiles):
        """Test counting bonds of one order."""
        butadiene = mol_from_smiles("C=CC=C")
        assert not BondOrderCountFilter(Chem.BondType.DOUBLE, 2).is_excluded(butadiene)
        assert BondOrderCountFilter(Chem.BondType.DOUBLE, 1).is_excluded(butadiene)
        assert BondOrderCountFilter(Chem.BondType.TRIPLE, 1, AT_LEAST).is_excluded(butadiene)

    def test_bond_order_required(self):
        """Test that the bond order must be given."""
        with pytest.raises(ValueError):
            BondOrderCountFilter(None, 1)

    def test_molecular_mass(self, mol_from_smiles):
        """Test mass thresholds and flavours."""
        ethanol = mol_from_smiles("CCO")
        assert MolecularMassFilter(46.0).is_excluded(ethanol)
        assert not MolecularMassFilter(46.1).is_excluded(ethanol)
        assert not MolecularMassFilter(46.05, flavour=MassFlavour.MONO_ISOTOPIC).is_excluded(ethanol)


class TestAtomFilters:
    """Tests for atomic number and pseudo atom filters."""

    def test_atomic_numbers(self, batch, collecting_reporter):
        """Test that wildcard atoms are invalid unless allowed."""
        records = batch("CC", "*C")
        assert ids(AtomicNumberFilter().run(records, collecting_reporter())) == ["0"]
        assert ids(AtomicNumberFilter(wildcard_is_valid=True).run(records, collecting_reporter())) == [
            "0",
            "1",
        ]
        assert ids(AtomicNumberFilter(keep_invalid=True).run(records, collecting_reporter())) == ["1"]

    def test_pseudo_atoms(self, batch, collecting_reporter):
        """Test excluding or selecting structures with pseudo atoms."""
        records = batch("CC", "*C")
        assert ids(PseudoAtomFilter().run(records, collecting_reporter())) == ["0"]
        assert ids(PseudoAtomFilter(keep_pseudo_atoms=True).run(records, collecting_reporter())) == ["1"]


class TestValenceFilter:
    """Tests for valence validation."""

    def test_valid_and_invalid(self, batch, unsanitized_mol, collecting_reporter):
        """Test that structures with invalid valences are excluded."""
        records = batch("CCO", "c1ccccc1")
        records.append(unsanitized_mol("C(C)(C)(C)(C)C"))
        records[2].SetProp("Curation_RecordID", "2")

        assert ids(ValenceFilter().run(records, collecting_reporter())) == ["0", "1"]
        assert ids(ValenceFilter(keep_invalid=True).run(records, collecting_reporter())) == ["2"]

    def test_kekulization_error_is_reported(self, batch, unsanitized_mol, collecting_reporter):
        """Test that non-kekulizable structures are dropped with their code."""
        records = batch("CCO")
        broken = unsanitized_mol("c1cccc1")
        broken.SetProp("Curation_RecordID", "1")
        records.append(broken)
        reporter = collecting_reporter(ErrorCode.KEKULIZATION_ERROR)

        assert ids(ValenceFilter().run(records, reporter)) == ["0"]
        assert reporter.allowed_count == 1

    def test_shared_model(self, table_from_rows, batch, collecting_reporter):
        """Test injecting a custom valence model."""
        # Only saturated carbon and hydrogen
        model = ValenceModel(table_from_rows((1, 0, 0, 1, 1), (6, 0, 0, 4, 4)))
        records = batch("CC", "CO", "C=C")
        assert ids(ValenceFilter(model).run(records, collecting_reporter())) == ["0"]


class TestPropertyFilters:
    """Tests for property presence filters and checkers."""

    def test_has_property(self, batch, collecting_reporter):
        """Test silent exclusion of structures lacking a property."""
        records = batch("C", "CC")
        records[1].SetProp("Source", "vendor")
        reporter = collecting_reporter()

        assert ids(HasPropertyFilter("Source").run(records, reporter)) == ["1"]
        assert ids(HasPropertyFilter("Source", keep_missing=True).run(records, reporter)) == ["0"]
        assert reporter.reported_codes == []

    def test_property_name_required(self):
        """Test that a blank property name is rejected."""
        with pytest.raises(ValueError):
            HasPropertyFilter(" ")
        with pytest.raises(ValueError):
            PropertyChecker("")

    def test_property_checker_reports(self, batch, collecting_reporter):
        """Test that checkers report excluded structures."""
        records = batch("C", "CC")
        records[0].SetProp("Source", "vendor")
        reporter = collecting_reporter(ErrorCode.MISSING_PROPERTY)

        assert ids(PropertyChecker("Source").run(records, reporter)) == ["0"]
        assert reporter.allowed_count == 1

    def test_property_checker_custom_code(self, batch, collecting_reporter):
        """Test reporting a custom code."""
        reporter = collecting_reporter(ErrorCode.UNSET_EXTERNAL_ID)
        PropertyChecker("Source", ErrorCode.UNSET_EXTERNAL_ID).run(batch("C"), reporter)
        assert reporter.reported_codes == [ErrorCode.UNSET_EXTERNAL_ID]

    def test_external_id_checker(self, batch, collecting_reporter):
        """Test that the external ID property is checked, not the record ID."""
        records = batch("C", "CC")
        records[1].SetProp("CHEMBL_ID", "CHEMBL17")
        reporter = collecting_reporter(ErrorCode.UNSET_EXTERNAL_ID)

        checker = ExternalIdChecker("CHEMBL_ID")
        assert ids(checker.run(records, reporter)) == ["1"]
        assert reporter.allowed_count == 1

    def test_external_id_checker_follows_property_name(self, batch, collecting_reporter):
        """Test that the checked property follows the step configuration."""
        records = batch("C")
        records[0].SetProp("Vendor_ID", "V-1")
        checker = ExternalIdChecker("CHEMBL_ID")
        checker.external_id_property_name = "Vendor_ID"

        assert checker.checked_property_name == "Vendor_ID"
        assert ids(checker.run(records, collecting_reporter())) == ["0"]

    def test_external_id_checker_requires_name(self):
        """Test that the checker cannot lose its property name."""
        checker = ExternalIdChecker("CHEMBL_ID")
        with pytest.raises(ValueError):
            checker.external_id_property_name = None
        with pytest.raises(ValueError):
            ExternalIdChecker(None)
