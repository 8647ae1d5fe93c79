import click

from ..cli_utils import handle_errors, pass_taggr
from ..render import console, render_sync_status
from ..sync import LABELS_FILE, METADATA_FILE, TYPES_FILE


@click.command('status')
@pass_taggr
@handle_errors
def status_handler(taggr):
    """Show local sync status.

    Reads only local files; no API key is needed.
    """
    store = taggr.metadata_store()
    metadata = store.load()

    if metadata is None:
        console.print("[yellow]No sync metadata found[/yellow]")
        console.print('[dim]Run "taggr pull --all" to sync labels.[/dim]')
        return

    files = {
        name: (taggr.output_dir / name).exists()
        for name in (LABELS_FILE, TYPES_FILE, METADATA_FILE)
    }
    render_sync_status(metadata, files)
