"""
Check command for taggr.

Compares the versions recorded in the sync metadata with the versions the
API reports. Suitable for CI: with ``CI=true`` output is terse and goes to
stderr, and ``--strict`` turns outdated or missing labels into exit code 1.
``taggr ci`` is the strict, terse form for build pipelines.
"""

import click

from ..cli_utils import handle_errors, pass_taggr
from ..exit_codes import MetadataMissingError, OutdatedLabelsError
from ..render import console
from ..sync import classify_changes


def run_check(taggr, strict=False, fix=False, ci=False):
    """Compare synced versions with the API and report what is out of date."""
    metadata = taggr.metadata_store().load()
    if metadata is None:
        if strict:
            raise MetadataMissingError()
        if ci:
            click.echo('No sync metadata found. Run "taggr pull --all" first.', err=True)
        else:
            console.print("[yellow]No sync metadata found[/yellow]")
            console.print('[dim]Labels have not been synced yet. Run "taggr pull --all" first.[/dim]')
        return

    puller = taggr.pull_client()
    if ci:
        labels = puller.client.list_labels()
    else:
        with console.status("Fetching current label versions..."):
            labels = puller.client.list_labels()

    diff = classify_changes(metadata, labels)
    outdated, missing, extra = diff.updated, diff.new, diff.deleted

    if diff.is_empty:
        if not ci:
            console.print("[green]✓ All labels are up-to-date![/green]")
        return

    if ci:
        if outdated:
            click.echo("Outdated labels: " + ", ".join(
                f"{name} ({old} → {new})" for name, old, new in outdated), err=True)
        if missing:
            click.echo(f"Missing labels: {', '.join(missing)}", err=True)
    else:
        if outdated:
            console.print(f"[yellow]⚠ Found {len(outdated)} outdated label(s):[/yellow]")
            for name, old, new in outdated:
                console.print(f"  {name}: [red]{old}[/red] → [green]{new}[/green]")
        if missing:
            console.print(f"[yellow]⚠ Found {len(missing)} new label(s) not in local files:[/yellow]")
            for name in missing:
                console.print(f"  {name}")
        if extra:
            console.print(f"[dim]ℹ {len(extra)} label(s) exist locally but not in cloud:[/dim]")
            for name in extra:
                console.print(f"[dim]  {name}[/dim]")

    if fix:
        puller.write_all(labels)
        if ci:
            click.echo(f"Pulled {len(labels)} label(s).", err=True)
        else:
            console.print(f"[green]✓ Pulled {len(labels)} label(s); local labels are up-to-date.[/green]")
        return

    if strict and (outdated or missing):
        raise OutdatedLabelsError(outdated=len(outdated), missing=len(missing))

    if not ci:
        console.print('[dim]Run "taggr pull --all" to update your labels.[/dim]')
        console.print('[dim]Use --strict flag to fail builds when labels are outdated.[/dim]')


@click.command('check')
@click.option('--strict', is_flag=True, help='Exit with code 1 when labels are outdated or missing')
@click.option('--fix', is_flag=True, help='Pull all labels when anything is out of date')
@pass_taggr
@handle_errors
def check_handler(taggr, strict, fix):
    """Check whether local labels are up to date.

    \b
    Examples:
        taggr check              # Report outdated labels
        taggr check --strict     # Fail the build when outdated
        taggr check --fix        # Pull the latest labels
    """
    run_check(taggr, strict=strict, fix=fix, ci=taggr.is_ci)


@click.command('ci')
@pass_taggr
@handle_errors
def ci_handler(taggr):
    """CI-friendly check: terse output on stderr, exit code 1 when outdated."""
    run_check(taggr, strict=True, ci=True)
