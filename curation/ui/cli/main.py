"""
Structure curation CLI - Main entry point.

This module provides the command-line interface for curating structure
files with a configured pipeline of processing steps.
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rdkit import Chem
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="curate",
    help="Chemical structure curation - filter and validate structure collections",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from curation import __version__

        console.print(f"Structure Curation v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """
    Chemical structure curation.

    Run 'curate COMMAND --help' for more information on a specific command.
    """
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


@app.command()
def init(
    path: Path = typer.Option(
        Path("curation.yaml"),
        "--path",
        "-p",
        help="Configuration file to create",
    ),
    preset: str = typer.Option(
        "structure-validity",
        "--preset",
        help="Step preset (structure-validity, drug-like, fragments)",
    ),
    external_id_property: Optional[str] = typer.Option(
        None,
        "--external-id",
        help="Structure property holding an external identifier",
    ),
) -> None:
    """Create a starter curation configuration file."""
    from curation.core.config import CurationConfig, PIPELINE_PRESETS, get_preset

    steps = get_preset(preset)
    if steps is None:
        console.print(f"[red]Error:[/red] Unknown preset '{preset}'")
        console.print(f"Available presets: {', '.join(PIPELINE_PRESETS)}")
        raise typer.Exit(1)

    if path.exists():
        console.print(f"[red]Error:[/red] {path} already exists")
        raise typer.Exit(1)

    config = CurationConfig(
        name=f"{preset}-curation",
        external_id_property=external_id_property,
        steps=steps,
    )
    try:
        config.to_yaml(path)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Configuration file: {path}")
    console.print()
    console.print("Next steps:")
    console.print(f"  1. Edit {path} to adjust the steps")
    console.print(f"  2. curate run <STRUCTURES.sdf> --config {path}")


@app.command()
def run(
    input_path: Path = typer.Argument(
        ...,
        help="SD or SMILES file to curate",
    ),
    config: Path = typer.Option(
        Path("curation.yaml"),
        "--config",
        "-c",
        help="Path to curation configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="SD file receiving the curated structures",
    ),
    report_dir: Optional[Path] = typer.Option(
        None,
        "--report-dir",
        "-r",
        help="Directory for the markdown report (overrides the configuration)",
    ),
) -> None:
    """Curate a structure file."""
    from curation.core.config import CurationConfig, build_loader, build_pipeline
    from curation.core.records import remove_record_ids

    console.print(Panel("[bold]Running Structure Curation[/bold]", title="Structure Curation"))

    if not config.exists():
        console.print(f"[red]Error:[/red] Config file not found: {config}")
        console.print("Run 'curate init' first to create a configuration.")
        raise typer.Exit(1)
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(1)

    curation_config = CurationConfig.from_yaml(config)
    if report_dir is not None:
        curation_config.reporter.output_dir = report_dir

    pipeline = build_pipeline(curation_config)
    loader = build_loader(curation_config.input)

    try:
        curated = pipeline.import_and_process(input_path, loader)
    except Exception as e:
        console.print(f"[red]Curation aborted:[/red] {e}")
        raise typer.Exit(1)

    if output is not None:
        remove_record_ids(curated)
        writer = Chem.SDWriter(str(output))
        try:
            for mol in curated:
                writer.write(mol)
        finally:
            writer.close()
        console.print(f"[green]✓[/green] Curated structures: {output}")

    table = Table(title=curation_config.name)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Input", str(input_path))
    table.add_row("Processing steps", str(len(pipeline)))
    table.add_row("Structures kept", str(len(curated)))
    report_path = getattr(pipeline.reporter, "last_report_path", None)
    if report_path is not None:
        table.add_row("Report", str(report_path))
    console.print(table)


@app.command()
def inspect_valence_list(
    path: Optional[Path] = typer.Argument(
        None,
        help="Valence list file (default: list shipped with the package)",
    ),
) -> None:
    """Show a summary of a valence list."""
    from curation.core.errors import ValenceTableFormatError
    from curation.valence import ValenceTable

    try:
        table = ValenceTable.default() if path is None else ValenceTable.from_file(path)
    except (OSError, ValenceTableFormatError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"{len(table)} rows, atomic numbers "
            f"{table.lowest_atomic_number}-{table.highest_atomic_number}",
            title=str(table.source),
        )
    )

    summary = Table(title="Configurations per element")
    summary.add_column("Element", style="cyan")
    summary.add_column("Atomic number", style="yellow")
    summary.add_column("Configurations", style="green")
    periodic_table = Chem.GetPeriodicTable()
    for atomic_number in table.atomic_numbers():
        summary.add_row(
            periodic_table.GetElementSymbol(atomic_number),
            str(atomic_number),
            str(table.group_count(atomic_number)),
        )
    console.print(summary)


if __name__ == "__main__":
    app()
