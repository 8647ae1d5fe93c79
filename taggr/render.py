"""
Rendering functions for taggr output.

This module handles all pretty-printing and table formatting.
Commands compute results, this module makes them human-readable.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .domain import RemoteLabel, SyncMetadata
from .sync.drift import to_camel_case
from .sync.watch import LabelDiff

console = Console()
err_console = Console(stderr=True)


def _format_time(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).strftime('%Y-%m-%d %H:%M:%S')
    except (ValueError, AttributeError):
        return value


def render_labels_table(labels: List[RemoteLabel]) -> None:
    """Render remote labels as a table."""
    if not labels:
        console.print("[yellow]No labels found.[/yellow]")
        return

    table = Table(
        title=f"Your Labels ({len(labels)})",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    table.add_column("Version", style="green")
    table.add_column("Category", style="blue")
    table.add_column("Published")

    for label in sorted(labels, key=lambda l: l.name):
        value = label.value if len(label.value) <= 50 else label.value[:47] + "..."
        table.add_row(
            escape(label.display_name or label.name),
            escape(value),
            f"v{label.version}",
            label.category,
            "✓" if label.is_published else "",
        )

    console.print(table)


def render_sync_status(metadata: SyncMetadata, files: Dict[str, bool], limit: int = 10) -> None:
    """Render the last sync summary, label versions and local file presence."""
    console.print()
    console.print("[bold]Taggr Sync Status[/bold]")
    console.print()
    console.print(f"  [dim]Last synced:[/dim] {_format_time(metadata.synced_at)}")
    console.print(f"  [dim]API URL:[/dim]     {escape(metadata.source_url)}")
    console.print(f"  [dim]Labels:[/dim]      {len(metadata.labels)}")
    console.print()

    if metadata.labels:
        table = Table(
            title="Label Versions",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )
        table.add_column("Label", style="cyan")
        table.add_column("Version", style="green")
        table.add_column("Synced", style="dim")

        names = sorted(metadata.labels)
        for name in names[:limit]:
            entry = metadata.labels[name]
            table.add_row(escape(name), f"v{entry.version}", _format_time(entry.synced_at))
        console.print(table)

        if len(names) > limit:
            console.print(f"  [dim]... and {len(names) - limit} more[/dim]")

    files_table = Table(
        title="Files",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    files_table.add_column("File")
    files_table.add_column("Present")
    for name, present in files.items():
        files_table.add_row(name, "[green]✓[/green]" if present else "[red]✗[/red]")
    console.print(files_table)


def render_diff(diff: LabelDiff) -> None:
    """Render a watch/check diff of remote changes."""
    console.print("[yellow]⚠ Label changes detected![/yellow]")

    if diff.updated:
        console.print(f"\n  [yellow]{len(diff.updated)} label(s) updated:[/yellow]")
        for name, old, new in diff.updated:
            console.print(f"    {escape(name)}: [red]{old}[/red] → [green]{new}[/green]")

    if diff.new:
        console.print(f"\n  [green]{len(diff.new)} new label(s):[/green]")
        for name in diff.new:
            console.print(f"    {escape(name)}")

    if diff.deleted:
        console.print(f"\n  [red]{len(diff.deleted)} label(s) deleted:[/red]")
        for name in diff.deleted:
            console.print(f"    {escape(name)}")
    console.print()


def render_drift_warning(reason: Optional[str]) -> None:
    err_console.print(f"[yellow]⚠ Warning: {escape(reason or 'Labels may have been manually edited')}[/yellow]")
    err_console.print("[dim]Pulling will overwrite your manual changes.[/dim]")
    err_console.print("[dim]If you want to keep your changes, consider:[/dim]")
    err_console.print("[dim]  1. Committing your changes to version control first[/dim]")
    err_console.print("[dim]  2. Creating labels in the Taggr dashboard instead[/dim]")


def render_files(files: List[Path]) -> None:
    console.print("[dim]Files written:[/dim]")
    for path in files:
        console.print(f"[dim]  {path}[/dim]")


def render_usage(labels: List[RemoteLabel], output_dir: Path) -> None:
    if not labels:
        return
    key = to_camel_case(labels[0].name) or 'label'
    source = (output_dir / 'labels.json').as_posix()
    if not output_dir.is_absolute() and not source.startswith('.'):
        source = f"./{source}"
    console.print()
    console.print("[bold]Usage:[/bold]")
    console.print(f"  import labels from '{source}';")
    console.print(f"  console.log(labels.{key});")
    console.print()


def render_error(message: str, hint: Optional[str] = None) -> None:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    if hint:
        err_console.print(f"[dim]{hint}[/dim]")
