"""Blame CLI command -- attribute findings from a JSON file."""

import json
from pathlib import Path
from typing import List, Optional

import typer

from ..blame import create_blamer
from ..exceptions import BlamekitError
from ..logging_config import setup_logging
from ..models import AttributionSummary, Finding
from . import app
from ._common import console, resolve_config


@app.command()
def blame(
    findings_file: Path = typer.Argument(
        ...,
        help="JSON file with a list of findings (file_name, primary_line_number, ...)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    repo: Path = typer.Option(
        Path("."),
        "--repo",
        "-r",
        help="Git checkout the findings were reported against",
        exists=True,
        file_okay=False,
        resolve_path=True,
    ),
    commit: Optional[str] = typer.Option(
        None,
        "--commit",
        "-c",
        help="Reference commit (default: $GIT_COMMIT, then HEAD)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Files blamed concurrently",
        min=1,
        max=64,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
        exists=True,
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write attributed findings to this JSON file",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Attribute each finding to the author and commit of its line.

    [bold cyan]Examples:[/bold cyan]

      blamekit blame findings.json --repo .

      blamekit blame findings.json --commit v1.2.0 --json

      blamekit blame findings.json -o attributed.json
    """
    try:
        settings = resolve_config(config, commit=commit, workers=workers, verbose=verbose, quiet=quiet)
        findings = load_findings(findings_file)
    except BlamekitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    logger = setup_logging(settings.verbosity)

    with create_blamer(repo, config=settings, logger=logger) as blamer:
        summary = blamer.blame(findings)

    if output is not None:
        output.write_text(json.dumps([f.to_dict() for f in findings], indent=2), encoding="utf-8")
        console.print(f"Wrote {len(findings)} findings to [blue]{output}[/blue]")

    if json_output:
        _output_json(findings, summary)
    elif output is None:
        _output_rich(findings, summary)


def load_findings(path: Path) -> List[Finding]:
    """Read findings from a JSON list or an object with a ``findings`` list."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise BlamekitError(f"Cannot read findings from {path}: {e}")

    if isinstance(data, dict):
        data = data.get("findings", [])
    if not isinstance(data, list):
        raise BlamekitError(f"Expected a list of findings in {path}")

    try:
        return [Finding.from_dict(entry) for entry in data]
    except (KeyError, TypeError, ValueError) as e:
        raise BlamekitError(f"Malformed finding in {path}: {e}")


def _output_json(findings: List[Finding], summary: AttributionSummary):
    """Machine-readable JSON output."""
    print(
        json.dumps(
            {
                "reference_commit": summary.reference_commit,
                "attributed": summary.attributed_findings,
                "total": summary.total_findings,
                "interrupted": summary.interrupted,
                "failed_files": summary.failed_files,
                "findings": [f.to_dict() for f in findings],
            },
            indent=2,
        )
    )


def _output_rich(findings: List[Finding], summary: AttributionSummary):
    """Human-readable Rich table output."""
    from rich.table import Table

    table = Table(
        title="Finding Attribution",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Author")
    table.add_column("Email", style="dim")
    table.add_column("Commit", style="yellow")

    for f in sorted(findings, key=lambda f: (f.file_name, f.primary_line_number)):
        table.add_row(
            f.file_name,
            str(f.primary_line_number),
            f.author_name or "[dim]-[/dim]",
            f.author_email or "",
            (f.commit_id or "")[:8],
        )

    console.print(table)
    commit = (summary.reference_commit or "-")[:12]
    console.print(
        f"Attributed [green]{summary.attributed_findings}[/green] of "
        f"{summary.total_findings} findings at [yellow]{commit}[/yellow]"
    )
    if summary.failed_files:
        console.print(f"[yellow]{len(summary.failed_files)} file(s) could not be blamed[/yellow]")
