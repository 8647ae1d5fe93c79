"""
Pull command for taggr.

Fetches labels from the API and writes labels.json, labels.d.ts and the
sync metadata under the configured output directory.
"""

import warnings

import click

from ..cli_utils import handle_errors, pass_taggr
from ..errors import DriftDetectedWarning
from ..exit_codes import CommandError
from ..render import console, render_drift_warning, render_files, render_usage


@click.command('pull')
@click.argument('name', required=False)
@click.option('-a', '--all', 'pull_all', is_flag=True, help='Pull all labels')
@pass_taggr
@handle_errors
def pull_handler(taggr, name, pull_all):
    """Pull label(s) and generate local files.

    \b
    Examples:
        taggr pull my-label     # Pull a specific label
        taggr pull --all        # Pull all labels
    """
    if not pull_all and not name:
        raise CommandError('Please specify a label name or use --all',
                           hint='Usage: taggr pull <label-name> | taggr pull --all')

    puller = taggr.pull_client()

    if pull_all:
        with console.status("Fetching all labels..."):
            with warnings.catch_warnings():
                # Drift is rendered below rather than as a Python warning
                warnings.simplefilter('ignore', DriftDetectedWarning)
                result = puller.pull_all()

        if not result.labels:
            console.print("[yellow]No labels found.[/yellow]")
            console.print("[dim]Create labels at https://taggr.dev[/dim]")
            return

        if result.drift is not None and result.drift.is_edited:
            render_drift_warning(result.drift.reason)

        console.print(f"[green]✓ Pulled {result.count} label(s) successfully![/green]")
    else:
        with console.status(f'Fetching label "{name}"...'):
            result = puller.pull_one(name)
        console.print(f'[green]✓ Pulled "{result.labels[0].name}" successfully![/green]')

    render_files(result.files)
    render_usage(result.labels, taggr.output_dir)
