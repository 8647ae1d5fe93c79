"""
Watch command for taggr.

Polls the API on an interval and re-pulls whenever a label is updated,
added or deleted. Runs until interrupted.
"""

import click

from ..cli_utils import handle_errors, pass_taggr
from ..exit_codes import MetadataMissingError
from ..render import console, render_diff, render_error
from ..sync import WatchLoop, resolve_interval


@click.command('watch')
@click.option('-i', '--interval', type=int, default=None,
              help='Seconds between checks (minimum 5, default 30)')
@pass_taggr
@handle_errors
def watch_handler(taggr, interval):
    """Watch for label changes and pull them automatically.

    \b
    Examples:
        taggr watch                  # Check every 30 seconds
        taggr watch --interval 60    # Check every minute
    """
    interval = resolve_interval(
        interval,
        default=taggr.watch_interval,
        minimum=taggr.min_watch_interval,
    )

    if taggr.metadata_store().load() is None:
        raise MetadataMissingError()

    puller = taggr.pull_client()

    def on_change(diff):
        render_diff(diff)
        console.print("[dim]Pulling updated labels...[/dim]")

    def on_error(error):
        render_error(str(error))

    loop = WatchLoop(puller, interval=interval, on_change=on_change, on_error=on_error)

    console.print("[green]Watch mode started[/green]")
    console.print(f"[dim]Watching for label changes (checking every {interval} seconds)...[/dim]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        loop.run()
    except KeyboardInterrupt:
        loop.stop()
        console.print("\n[dim]Watch mode stopped[/dim]")
