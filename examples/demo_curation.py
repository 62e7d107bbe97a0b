#!/usr/bin/env python3
"""
Demo curation script.

This script builds a small curation pipeline in code, runs it on a handful
of structures (some of them deliberately broken) and writes a markdown
report of everything that was dropped.

Usage:
    python examples/demo_curation.py

Requirements:
    - RDKit
"""

import sys
from pathlib import Path

from rdkit import Chem

from curation.core.records import get_external_id, get_record_id
from curation.core.steps import (
    AtomicNumberFilter,
    CurationPipeline,
    ExternalIdChecker,
    HeavyAtomCountFilter,
    MolecularMassFilter,
    PseudoAtomFilter,
    ThresholdDirection,
    ValenceFilter,
)
from curation.reporting import MarkdownReporter

# (name, SMILES); pentavalent carbon and a missing name are intentional
SAMPLE_STRUCTURES = [
    ("aspirin", "CC(=O)OC1=CC=CC=C1C(=O)O"),
    ("caffeine", "CN1C=NC2=C1C(=O)N(C(=O)N2C)C"),
    ("methane", "C"),
    ("linker", "*CCOCC*"),
    ("broken-carbon", "CC(C)(C)(C)(C)C"),
    (None, "CC(=O)NC1=CC=C(C=C1)O"),
    ("atorvastatin", "CC(C)C1=C(C(=C(N1CCC(CC(CC(=O)O)O)O)C2=CC=C(C=C2)F)C3=CC=CC=C3)C(=O)NC4=CC=CC=C4"),
]

REPORT_DIR = Path("demo_output")


def create_structures() -> list:
    """Parse the sample structures without rejecting invalid valences."""
    structures = []
    for name, smiles in SAMPLE_STRUCTURES:
        mol = Chem.MolFromSmiles(smiles, sanitize=False)
        mol.UpdatePropertyCache(strict=False)
        Chem.FastFindRings(mol)
        if name is not None:
            mol.SetProp("Name", name)
        structures.append(mol)
    # Structures lost upstream are reported as well
    structures.append(None)
    return structures


def main():
    """Run demo curation."""
    print("=" * 60)
    print("Structure Curation - Demo")
    print("=" * 60)
    print()

    structures = create_structures()
    print(f"Created {len(structures)} structures")

    pipeline = (
        CurationPipeline(MarkdownReporter(REPORT_DIR), external_id_property_name="Name")
        .add_step(ExternalIdChecker("Name"))
        .add_step(
            CurationPipeline()
            .add_step(AtomicNumberFilter())
            .add_step(PseudoAtomFilter())
            .add_step(ValenceFilter())
        )
        .add_step(HeavyAtomCountFilter(3, ThresholdDirection.AT_LEAST))
        .add_step(MolecularMassFilter(500.0))
    )

    print("Pipeline steps:")
    for step in pipeline.steps:
        print(f"  [{step.position}] {type(step).__name__}")
    print()

    curated = pipeline.run_standalone(structures)

    print("RESULTS")
    print("=" * 60)
    print(f"Kept {len(curated)}/{len(structures)} structures:")
    for mol in curated:
        print(f"  {get_record_id(mol):<4} {get_external_id(mol, 'Name')}")
    print()
    print(f"Report written to: {pipeline.reporter.last_report_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
