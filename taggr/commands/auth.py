"""
Authentication commands: login, logout and whoami.

The API key and URL live in the ``api`` section of the config file.
"""

import click

from ..cli_utils import handle_errors, pass_taggr
from ..config import save_config
from ..infra import TaggrClient
from ..render import console


def _user_stat(user, key):
    stats = user.get('stats') or {}
    return stats.get(key, 0)


@click.command('login')
@click.argument('api_key')
@click.option('-u', '--url', help='API URL (default: configured api.url)')
@pass_taggr
@handle_errors
def login_handler(taggr, api_key, url):
    """Authenticate with your Taggr API key.

    The key is verified against the API before it is saved.
    """
    api_url = (url or taggr.api_url).rstrip('/')
    client = TaggrClient(api_url, api_key,
                         timeout=taggr.config.get('api', {}).get('timeout_seconds', 30))

    with console.status("Verifying API key..."):
        user = client.whoami()

    taggr.config.setdefault('api', {})
    taggr.config['api']['key'] = api_key
    taggr.config['api']['url'] = api_url
    path = save_config(taggr.config)

    console.print("[green]✓ Successfully logged in![/green]")
    console.print(f"  [dim]User:[/dim]   {user.get('displayName') or user.get('email', '')}")
    console.print(f"  [dim]Email:[/dim]  {user.get('email', '')}")
    console.print(f"  [dim]Labels:[/dim] {_user_stat(user, 'totalLabels')}")
    console.print(f"[dim]Credentials saved to {path}[/dim]")
    console.print('[dim]You can now use "taggr pull" to fetch your labels.[/dim]')


@click.command('logout')
@pass_taggr
@handle_errors
def logout_handler(taggr):
    """Remove the saved API key."""
    if not taggr.is_authenticated:
        console.print("[yellow]You are not logged in.[/yellow]")
        return

    taggr.config['api']['key'] = ''
    save_config(taggr.config)
    console.print("[green]Successfully logged out.[/green]")


@click.command('whoami')
@pass_taggr
@handle_errors
def whoami_handler(taggr):
    """Show the current authenticated user."""
    client = taggr.require_auth()
    with console.status("Fetching user info..."):
        user = client.whoami()

    console.print("[bold]Logged in as:[/bold]")
    console.print(f"  [dim]Name:[/dim]   {user.get('displayName') or 'Not set'}")
    console.print(f"  [dim]Email:[/dim]  {user.get('email') or 'Not set'}")
    console.print(f"  [dim]UID:[/dim]    {user.get('uid') or 'Not set'}")
    console.print(f"  [dim]Labels:[/dim] {_user_stat(user, 'totalLabels')}")
    if user.get('createdAt'):
        console.print(f"  [dim]Joined:[/dim] {user['createdAt']}")
