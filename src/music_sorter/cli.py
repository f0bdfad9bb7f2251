"""Command line interface for music sorter."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.metadata import MetadataReader
from .core.sorter import LibrarySorter, SortReport
from .exceptions import ConfigurationError, MetadataError, SortAbortedError, SorterError
from .models.config import FILE_OPERATION_MODES, SortConfig, load_config
from .script.evaluator import PathEvaluator
from .script.preprocessor import normalize
from .script.tags import StandardTag, resolve

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='[%(levelname)s] %(name)s: %(message)s',
    )


def _read_script(script: Path) -> str:
    try:
        return script.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read script {script}: {e}")


def _print_report(report: SortReport, mode: str) -> None:
    for line in report.logs:
        if line.startswith("Error"):
            console.print(line, style="red", markup=False, highlight=False)
        else:
            console.print(line, markup=False, highlight=False)

    results_table = Table(title="Results")
    results_table.add_column("Counter", style="cyan")
    results_table.add_column("Count", justify="right")
    results_table.add_row("Processed", str(report.processed))
    results_table.add_row(f"Completed ({mode})", str(report.completed))
    results_table.add_row("Errors", str(report.errors))
    console.print(results_table)


@click.group()
@click.version_option(package_name="music-sorter")
def cli():
    """Sort your music library with a tag-driven script."""
    pass


@cli.command()
@click.argument('source', type=click.Path(path_type=Path))
@click.argument('destination', type=click.Path(path_type=Path))
@click.option(
    '--script',
    'script_path',
    required=True,
    type=click.Path(path_type=Path),
    help='Sort script file'
)
@click.option(
    '--mode',
    type=click.Choice(FILE_OPERATION_MODES, case_sensitive=False),
    default=None,
    help='File operation mode (default: preview)'
)
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    help='Configuration file path'
)
@click.option(
    '--workers',
    type=int,
    default=None,
    help='Number of threads reading metadata'
)
@click.option(
    '--legacy-syntax',
    is_flag=True,
    default=None,
    help='Normalize the script exactly like historical versions'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Verbose output'
)
def sort(
    source: Path,
    destination: Path,
    script_path: Path,
    mode: Optional[str],
    config: Optional[Path],
    workers: Optional[int],
    legacy_syntax: Optional[bool],
    verbose: bool
):
    """Sort music from SOURCE directory into DESTINATION directory."""
    _setup_logging(verbose)

    try:
        if config:
            cfg = load_config(config, source_directory=source, destination_directory=destination)
        else:
            cfg = SortConfig(source, destination)
        if mode is not None:
            cfg.mode = mode.lower()
        if workers is not None:
            cfg.workers = max(1, workers)
        if legacy_syntax:
            cfg.legacy_syntax = True
    except ConfigurationError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print("\n[bold cyan]Music Sort Plan[/bold cyan]")
    console.print(f"Source: {cfg.source_directory}", markup=False)
    console.print(f"Destination: {cfg.destination_directory}", markup=False)
    console.print(f"Script: {script_path}", markup=False)
    console.print(f"Mode: {cfg.mode}")

    sorter = LibrarySorter(cfg)
    try:
        report = sorter.run_script_file(script_path)
    except SortAbortedError as e:
        if e.report is not None:
            _print_report(e.report, cfg.summary_mode)
        console.print(f"\n[red]Error during sorting process: {escape(str(e))}[/red]")
        sys.exit(1)

    _print_report(report, cfg.summary_mode)


@cli.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--legacy-syntax', is_flag=True, help='Normalize the script exactly like historical versions')
def check(script: Path, legacy_syntax: bool):
    """Show how SCRIPT is normalized and which lines can never run."""
    normalized = normalize(_read_script(script), legacy=legacy_syntax)
    evaluator = PathEvaluator(normalized)

    table = Table(title=f"Instructions ({len(normalized)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Level", justify="right", style="cyan")
    table.add_column("Instruction")
    for number, instruction in enumerate(normalized, start=1):
        table.add_row(str(number), str(instruction.level), escape(instruction.text))
    console.print(table)

    if evaluator.unreachable:
        console.print(f"\n[yellow]{len(evaluator.unreachable)} unreachable line(s):[/yellow]")
        for instruction in evaluator.unreachable:
            console.print(f"  {instruction.render()}", markup=False)
    else:
        console.print("\n[green]✓ Every line is reachable[/green]")


@cli.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--legacy-syntax', is_flag=True, help='Normalize the script exactly like historical versions')
def evaluate(script: Path, file_path: Path, legacy_syntax: bool):
    """Show the tags of FILE_PATH and the path SCRIPT computes for it."""
    evaluator = PathEvaluator(normalize(_read_script(script), legacy=legacy_syntax))

    try:
        metadata = MetadataReader.read(file_path)
    except MetadataError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"\n[bold]File: {file_path.name}[/bold]")

    info_table = Table()
    info_table.add_column("Tag", style="cyan")
    info_table.add_column("Value")
    for tag in StandardTag:
        value = resolve(tag.value, metadata)
        if value:
            info_table.add_row(tag.value, escape(value))
    for key, value in list(metadata.custom.items())[:20]:
        text = getattr(value, 'text', value)
        info_table.add_row(f"[dim]{escape(key)}[/dim]", escape(str(text)))
    console.print(info_table)

    fragment = evaluator.evaluate(metadata)
    if fragment:
        console.print(f"\n[cyan]Path:[/cyan] {escape(fragment + file_path.suffix)}", highlight=False)
    else:
        console.print("\n[yellow]Skipped (STOP or no path generated)[/yellow]")


@cli.command()
@click.option('--host', default='0.0.0.0', show_default=True, help='Interface to listen on')
@click.option('--port', default=8080, show_default=True, type=int, help='Port to listen on')
@click.option('--verbose', is_flag=True, help='Verbose output')
def serve(host: str, port: int, verbose: bool):
    """Serve the sort endpoint over HTTP."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(levelname)s] %(name)s: %(message)s',
    )
    from .server import run_server
    run_server(host=host, port=port)


def main():
    """Entry point for the CLI."""
    try:
        cli()
    except SorterError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == '__main__':
    main()
