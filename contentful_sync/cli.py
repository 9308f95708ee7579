"""Main CLI interface for the Contentful sync tool."""

import asyncio
import logging
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import SyncConfig, load_config_from_env
from .descriptors import DescriptorError, load_content_types, load_entries
from .migrators import ContentTypeSyncError
from .reporting import Reporter
from .sync import ContentfulSync

app = typer.Typer(
    name="contentful-sync",
    help="Push local content types and entries to a Contentful space",
    rich_markup_mode="rich",
    no_args_is_help=True
)

console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
):
    """Contentful content model and entry sync."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def _build_config(
    space_id: Optional[str],
    token: Optional[str],
    models: Optional[Path],
    entries: Optional[Path],
    rate: Optional[int],
    concurrency: Optional[int],
    dry_run: bool,
    validate_status: bool,
) -> SyncConfig:
    try:
        config = load_config_from_env(
            space_id=space_id,
            management_token=token,
            models_path=models,
            entries_path=entries,
            requests_per_second=rate,
            concurrency=concurrency,
        )
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    if not config.is_configured and not dry_run:
        console.print("[red]Error: CONTENTFUL_SPACE_ID and CONTENTFUL_MANAGEMENT_TOKEN (or --space-id/--token) required[/red]")
        raise typer.Exit(1)

    config.dry_run = dry_run
    config.validate_status = config.validate_status and validate_status
    return config


SpaceOption = typer.Option(None, "--space-id", help="Contentful space id [env: CONTENTFUL_SPACE_ID]")
TokenOption = typer.Option(None, "--token", help="Management API token [env: CONTENTFUL_MANAGEMENT_TOKEN]")
ModelsOption = typer.Option(None, "--models", help="Directory of content type descriptors")
EntriesOption = typer.Option(None, "--entries", help="Directory of entry descriptors")
RateOption = typer.Option(None, "--rate", help="Maximum requests per second")
ConcurrencyOption = typer.Option(None, "--concurrency", help="Number of items processed concurrently")
DryRunOption = typer.Option(False, "--dry-run", help="Preview changes without calling the API")
ValidateOption = typer.Option(True, "--validate-status/--no-validate-status", help="Treat non-2xx responses as errors")
ReportOption = typer.Option(None, "--report", help="Write a markdown report to this path")


@app.command()
def models(
    space_id: Optional[str] = SpaceOption,
    token: Optional[str] = TokenOption,
    models_path: Optional[Path] = ModelsOption,
    rate: Optional[int] = RateOption,
    concurrency: Optional[int] = ConcurrencyOption,
    dry_run: bool = DryRunOption,
    validate_status: bool = ValidateOption,
    report: Optional[Path] = ReportOption,
):
    """Create, update and publish content types."""
    config = _build_config(space_id, token, models_path, None, rate, concurrency, dry_run, validate_status)
    _run(_models_main(config, report))


@app.command()
def entries(
    space_id: Optional[str] = SpaceOption,
    token: Optional[str] = TokenOption,
    entries_path: Optional[Path] = EntriesOption,
    rate: Optional[int] = RateOption,
    concurrency: Optional[int] = ConcurrencyOption,
    dry_run: bool = DryRunOption,
    validate_status: bool = ValidateOption,
    report: Optional[Path] = ReportOption,
):
    """Update and republish existing entries."""
    config = _build_config(space_id, token, None, entries_path, rate, concurrency, dry_run, validate_status)
    _run(_entries_main(config, report, seed=False))


@app.command()
def seed(
    space_id: Optional[str] = SpaceOption,
    token: Optional[str] = TokenOption,
    entries_path: Optional[Path] = EntriesOption,
    rate: Optional[int] = RateOption,
    concurrency: Optional[int] = ConcurrencyOption,
    dry_run: bool = DryRunOption,
    validate_status: bool = ValidateOption,
    report: Optional[Path] = ReportOption,
):
    """Create and publish entries."""
    config = _build_config(space_id, token, None, entries_path, rate, concurrency, dry_run, validate_status)
    _run(_entries_main(config, report, seed=True))


@app.command()
def inspect(
    models_path: Optional[Path] = ModelsOption,
    entries_path: Optional[Path] = EntriesOption,
):
    """List the descriptors that would be synced."""
    if models_path is None and entries_path is None:
        raise typer.BadParameter("Pass --models and/or --entries")

    try:
        if models_path is not None:
            table = Table(title="Content Types", show_header=True, header_style="bold blue")
            table.add_column("Id", style="cyan")
            table.add_column("Name")
            table.add_column("Fields", justify="right")
            table.add_column("Editor Controls", justify="right")
            for descriptor in load_content_types(models_path):
                table.add_row(
                    descriptor.id,
                    descriptor.name,
                    str(len(descriptor.fields)),
                    str(len(descriptor.editor_controls()))
                )
            console.print(table)

        if entries_path is not None:
            table = Table(title="Entries", show_header=True, header_style="bold blue")
            table.add_column("Id", style="cyan")
            table.add_column("Content Type")
            table.add_column("Fields", justify="right")
            for descriptor in load_entries(entries_path):
                table.add_row(
                    descriptor.entry_id or "[dim]<new>[/dim]",
                    descriptor.content_type_id or "[red]missing[/red]",
                    str(len(descriptor.fields))
                )
            console.print(table)
    except DescriptorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled by user[/yellow]")
        raise typer.Exit(1)
    except DescriptorError as e:
        console.print(f"[red]Descriptor error: {e}[/red]")
        raise typer.Exit(1)


async def _models_main(config: SyncConfig, report: Optional[Path]) -> None:
    reporter = Reporter(console)
    failed = False

    console.print("[bold cyan]Syncing content types[/bold cyan]\n")
    async with ContentfulSync(config, console=console) as sync:
        try:
            reporter.add_content_types(await sync.migrate_content_types())
        except ContentTypeSyncError as e:
            failed = True
            reporter.add_content_types(e.results)
            for content_type_id, error in e.failures.items():
                reporter.add_content_type_failure(content_type_id, error)

    _finish(reporter, report, config.dry_run)
    if failed:
        raise typer.Exit(1)


async def _entries_main(config: SyncConfig, report: Optional[Path], seed: bool) -> None:
    reporter = Reporter(console)

    console.print(f"[bold cyan]{'Seeding' if seed else 'Updating'} entries[/bold cyan]\n")
    async with ContentfulSync(config, console=console) as sync:
        results = await (sync.seed_entries() if seed else sync.migrate_entries())
    reporter.add_entries(results)

    _finish(reporter, report, config.dry_run)


def _finish(reporter: Reporter, report: Optional[Path], dry_run: bool) -> None:
    console.print(f"\n{'='*60}")
    reporter.print_summary(dry_run)
    console.print(f"{'='*60}")
    if report is not None:
        reporter.generate_markdown_report(report, dry_run)


if __name__ == "__main__":
    app()
