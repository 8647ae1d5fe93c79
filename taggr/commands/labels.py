import json

import click

from ..cli_utils import handle_errors, pass_taggr
from ..render import console, render_labels_table


@click.command('list')
@click.option('--json', 'as_json', is_flag=True, help='Output labels as JSONL instead of a table')
@pass_taggr
@handle_errors
def list_handler(taggr, as_json):
    """List all your labels."""
    client = taggr.require_auth()
    if as_json:
        labels = client.list_labels()
        for label in labels:
            print(json.dumps(label.to_dict(), ensure_ascii=False), flush=True)
        return

    with console.status("Fetching labels..."):
        labels = client.list_labels()
    render_labels_table(labels)
    if labels:
        console.print('[dim]Run "taggr pull --all" to download them locally.[/dim]')
