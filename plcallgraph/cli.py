"""
Command-line interface for pl-callgraph
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import BodyExtent, load_config
from .errors import CallGraphError
from .graph.exporter import GraphExporter, derive_output_path
from .graph.models import GraphExportOptions
from .parsing.scanner import PerlScanner
from .pipeline import run_pipeline
from .report.console import ConsoleReporter

# Initialize typer app
app = typer.Typer(
    name="pl-callgraph",
    help="Generate GraphViz call graphs for Perl scripts and modules",
    add_completion=False
)

console = Console(stderr=True)
output_console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich on stderr"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def version_callback(value: bool):
    if value:
        typer.echo(f"pl-callgraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True,
        help="Show version and exit"
    )
):
    """Generate GraphViz call graphs for Perl scripts and modules"""
    pass


@app.command()
def graph(
    files: List[str] = typer.Argument(..., help="Perl scripts or modules, scanned in order"),
    start: Optional[str] = typer.Option(
        None, "--start", "-s",
        help="Regex selecting start nodes (matched against file:sub, case-insensitive)"
    ),
    ignore: Optional[List[str]] = typer.Option(
        None, "--ignore", "-i", help="Regex of callee names to drop (can be repeated)"
    ),
    cluster: Optional[bool] = typer.Option(
        None, "--cluster/--no-cluster",
        help="Group subroutines by file"
    ),
    strip_paths: Optional[bool] = typer.Option(
        None, "--strip-paths/--keep-paths",
        help="Identify files by base name or by the path as given"
    ),
    body_extent: Optional[BodyExtent] = typer.Option(
        None, "--body-extent",
        help="How the end of a subroutine body is detected"
    ),
    formats: Optional[List[str]] = typer.Option(
        None, "--format", "-f",
        help="Output format: dot, json or any graphviz format such as svg, png (can be repeated)"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o",
        help="Output file, or directory for an auto-generated name (default: stdout)"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
    report_ambiguous: Optional[bool] = typer.Option(
        None, "--report-ambiguous/--no-report-ambiguous",
        help="List calls dropped because the callee is defined in several files"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress console output"
    )
):
    """Generate a call graph for Perl files"""
    setup_logging(verbose)
    reporter = ConsoleReporter(quiet=quiet, console=console)

    try:
        config = load_config(
            config_file,
            start=start,
            ignore=ignore or None,
            cluster=cluster,
            strip_paths=strip_paths,
            body_extent=body_extent,
            formats=formats or None,
            output=output,
            report_ambiguous=report_ambiguous,
        )

        result = run_pipeline(files, config)

        reporter.print_summary(result.stats)
        if config.report_ambiguous:
            reporter.print_ambiguous(result.call_graph.ambiguous_calls)

        exporter = GraphExporter(result.call_graph, result.traversal)
        for fmt in config.formats:
            options = GraphExportOptions(format=fmt, clustering=config.cluster)
            if config.output is None:
                _, data = exporter.render_with_fallback(options)
                sys.stdout.buffer.write(data)
                sys.stdout.flush()
                continue

            path = derive_output_path(config.output, fmt, config.start)
            if len(config.formats) > 1 and path == config.output:
                path = str(Path(path).with_suffix(f'.{fmt}'))
            written_format, written_path = exporter.export(path, options)
            reporter.print_output(written_format, written_path)

    except (CallGraphError, ValidationError, ValueError, OSError, yaml.YAMLError) as e:
        reporter.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def definitions(
    files: List[str] = typer.Argument(..., help="Perl scripts or modules"),
    strip_paths: bool = typer.Option(
        True, "--strip-paths/--keep-paths",
        help="Identify files by base name or by the path as given"
    ),
    body_extent: BodyExtent = typer.Option(
        BodyExtent.COLUMN_ZERO, "--body-extent",
        help="How the end of a subroutine body is detected"
    ),
    shared_only: bool = typer.Option(
        False, "--shared", help="Only show names defined in more than one file"
    )
):
    """List the subroutine definitions found in Perl files"""
    setup_logging()
    try:
        scan = PerlScanner(strip_paths=strip_paths, body_extent=body_extent).scan_files(files)
    except CallGraphError as e:
        ConsoleReporter(console=console).print_error(str(e))
        raise typer.Exit(1)

    defined = scan.defined_names()
    table = Table(title=f"Subroutines ({len(defined)} names)")
    table.add_column("Name", style="bold")
    table.add_column("File")
    table.add_column("Line", justify="right")

    for definition in scan.definitions:
        if definition.implicit:
            continue
        if shared_only and len(defined[definition.name]) < 2:
            continue
        table.add_row(definition.name, definition.file, str(definition.line))

    output_console.print(table)


if __name__ == "__main__":
    app()
