"""
llmtxt-check CLI - llm.txt conformance checker

A command-line tool for validating llm.txt documents:
1. Discover llm.txt files in the given files and directories
2. Validate each one (frontmatter, sections, Index vs Module Sections, example references)
3. Print a table per file, or JSON, and exit non-zero if any document has errors
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from llmtxt_check import __version__
from llmtxt_check.config import load_config
from llmtxt_check.pipeline.runner import BatchValidationRunner
from llmtxt_check.schemas import DIAGNOSTIC_CATALOG, Report, Severity
from llmtxt_check.utils.file_scanner import discover_llm_txt

app = typer.Typer(
    name="llmtxt-check",
    help="Conformance checker for llm.txt documents",
    add_completion=False,
)

console = Console()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def _print_report(report: Report):
    status = "[green]✅ passed[/green]" if report.ok else "[red]❌ failed[/red]"
    if report.fatal:
        status = "[red]💥 fatal parse error[/red]"
    console.print(f"\n[bold]{report.source}[/bold]  {status}")

    if not report.diagnostics:
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Code", no_wrap=True)
    table.add_column("Message")

    for diagnostic in report.diagnostics:
        style = SEVERITY_STYLES[diagnostic.severity]
        table.add_row(
            str(diagnostic.span),
            f"[{style}]{diagnostic.severity.value}[/{style}]",
            diagnostic.code,
            diagnostic.message,
        )
    console.print(table)


def _print_summary(reports: List[Report]):
    passed = sum(1 for report in reports if report.ok)
    errors = sum(report.error_count for report in reports)
    warnings = sum(report.warning_count for report in reports)
    infos = sum(report.info_count for report in reports)

    border = "green" if passed == len(reports) else "red"
    console.print("\n")
    console.print(Panel.fit(
        f"[bold]📊 {passed}/{len(reports)} documents passed[/bold]\n"
        f"Errors: [red]{errors}[/red]  Warnings: [yellow]{warnings}[/yellow]  Infos: [cyan]{infos}[/cyan]",
        border_style=border
    ))


@app.command()
def check(
    paths: List[Path] = typer.Argument(..., help="llm.txt files or directories to scan"),
    language: Optional[List[str]] = typer.Option(
        None,
        "--language",
        "-L",
        help="Accepted ecosystem language (repeatable; replaces the configured set)",
    ),
    allow: Optional[List[str]] = typer.Option(
        None,
        "--allow",
        "-a",
        help="Extra allow-listed reference prefix (repeatable)",
    ),
    strict_order: Optional[bool] = typer.Option(
        None,
        "--strict-order/--no-strict-order",
        help="Report section order violations as warnings (default) or infos",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML config file (default: ./llmtxt-check.yaml if present)",
    ),
    num_workers: int = typer.Option(4, "--workers", "-w", help="Number of parallel workers"),
    output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help="Output format"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
):
    """
    Validate llm.txt documents.

    Exit status is 0 when every document passes, 1 when any document has
    an error diagnostic and 2 on usage or configuration errors.

    Example:
        llmtxt-check check docs/llm.txt
        llmtxt-check check . --format json --no-strict-order -a mylib.compat
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_path).with_overrides(
            languages=language,
            allow=allow,
            strict_order=strict_order,
        )
        documents = discover_llm_txt(paths)
    except ValueError as e:
        console.print(f"\n[red]❌ Error: {e}[/red]")
        raise typer.Exit(EXIT_USAGE)

    if not documents:
        console.print("[red]❌ No llm.txt files found[/red]")
        raise typer.Exit(EXIT_USAGE)

    try:
        runner = BatchValidationRunner(
            config=config,
            num_workers=num_workers,
            show_progress=output_format == OutputFormat.TEXT and len(documents) > 1,
        )
        reports = runner.validate_files(documents)
    except (OSError, ValueError) as e:
        console.print(f"\n[red]❌ Error: {e}[/red]")
        raise typer.Exit(EXIT_USAGE)

    all_ok = all(report.ok for report in reports)

    if output_format == OutputFormat.JSON:
        console.print_json(data={
            "ok": all_ok,
            "reports": [report.model_dump(mode="json") for report in reports],
        })
    else:
        for report in reports:
            _print_report(report)
        _print_summary(reports)

    raise typer.Exit(EXIT_OK if all_ok else EXIT_FAILED)


@app.command()
def codes():
    """List every diagnostic code with its default severity."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Code", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Description")

    for code, (severity, description) in DIAGNOSTIC_CATALOG.items():
        style = SEVERITY_STYLES[Severity(severity)]
        table.add_row(code, f"[{style}]{severity}[/{style}]", description)

    console.print(table)


@app.command()
def version():
    """Show the llmtxt-check version."""
    console.print(f"llmtxt-check {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
