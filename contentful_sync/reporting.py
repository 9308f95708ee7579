"""Reporting for sync runs."""

from pathlib import Path
from typing import Iterable, Optional
from datetime import datetime
from rich.console import Console
from rich.table import Table

from .config import ContentTypeResult, EntryResult, SyncStats


class Reporter:
    """Collects results of a sync run and renders them."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.stats = SyncStats()

    def add_content_types(self, results: Iterable[ContentTypeResult]) -> None:
        for result in results:
            self.stats.add_content_type(result)

    def add_content_type_failure(self, content_type_id: str, error: BaseException) -> None:
        self.stats.add_failure(content_type_id, "content_type", str(error))

    def add_entries(self, results: Iterable[EntryResult]) -> None:
        for result in results:
            self.stats.add_entry(result)

    def print_summary(self, dry_run: bool = False) -> None:
        """Print a summary of the sync results."""
        title = "DRY RUN SUMMARY" if dry_run else "SYNC SUMMARY"

        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Count", justify="right", style="green")

        table.add_row("Content Types", str(self.stats.content_types))
        table.add_row("Editor Interfaces", str(self.stats.editor_interfaces))
        table.add_row("Entries Created", str(self.stats.entries_created))
        table.add_row("Entries Updated", str(self.stats.entries_updated))
        table.add_row("Errors", str(self.stats.errors))

        self.console.print(table)

        if self.stats.failures:
            self.console.print(f"\n[red]Found {len(self.stats.failures)} errors:[/red]")
            error_table = Table(show_header=True, header_style="bold red")
            error_table.add_column("Id", style="yellow")
            error_table.add_column("Operation", style="cyan")
            error_table.add_column("Error", style="red")

            for failure in self.stats.failures[:10]:  # Show first 10 errors
                error = failure["error"]
                error_table.add_row(
                    failure["id"],
                    failure["operation"],
                    error[:80] + "..." if len(error) > 80 else error
                )

            if len(self.stats.failures) > 10:
                error_table.add_row("...", "...", f"and {len(self.stats.failures) - 10} more errors")

            self.console.print(error_table)

    def generate_markdown_report(self, output_path: Path, dry_run: bool = False) -> None:
        """Write a markdown report of the run."""
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.build_markdown_report(dry_run))

        self.console.print(f"[green]Report written to {output_path}[/green]")

    def build_markdown_report(self, dry_run: bool = False) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        title = "Contentful Sync Report (DRY RUN)" if dry_run else "Contentful Sync Report"

        content = f"""# {title}

**Generated:** {timestamp}

## Summary Statistics

| Metric | Count |
|--------|-------|
| Content Types | {self.stats.content_types} |
| Editor Interfaces | {self.stats.editor_interfaces} |
| Entries Created | {self.stats.entries_created} |
| Entries Updated | {self.stats.entries_updated} |
| Errors | {self.stats.errors} |

"""

        if self.stats.failures:
            content += "## Errors and Failures\n\n"
            content += "| Id | Operation | Error |\n"
            content += "|----|-----------|-------|\n"

            for failure in self.stats.failures[:20]:
                error_text = failure["error"].replace("|", "\\|").replace("\n", " ")[:100]
                content += f"| {failure['id']} | {failure['operation']} | {error_text} |\n"

            if len(self.stats.failures) > 20:
                content += f"\n*... and {len(self.stats.failures) - 20} more errors*\n"

        return content
