#!/usr/bin/env python3

import click

from taggr.config import load_config, configure_logging
from taggr.context import TaggrContext
from taggr.commands.pull import pull_handler
from taggr.commands.check import check_handler, ci_handler
from taggr.commands.watch import watch_handler
from taggr.commands.status import status_handler
from taggr.commands.labels import list_handler
from taggr.commands.auth import login_handler, logout_handler, whoami_handler
from taggr.commands.config import config_cmd


@click.group()
@click.version_option(package_name='taggr')
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """taggr - Pull and manage your labels locally.

    \b
    Examples:
        taggr login YOUR_API_KEY     # Authenticate with API key
        taggr list                   # List all your labels
        taggr pull my-label          # Pull a specific label
        taggr pull --all             # Pull all labels
        taggr check --strict         # Fail CI when labels are outdated
        taggr watch                  # Pull changes as they happen
    """
    if ctx.obj is None:
        config = load_config()
        ctx.obj = TaggrContext(config)
    configure_logging(ctx.obj.config, verbose=verbose)


# Sync commands
cli.add_command(pull_handler, name='pull')
cli.add_command(check_handler, name='check')
cli.add_command(ci_handler, name='ci')
cli.add_command(watch_handler, name='watch')
cli.add_command(status_handler, name='status')

# Account commands
cli.add_command(list_handler, name='list')
cli.add_command(login_handler, name='login')
cli.add_command(logout_handler, name='logout')
cli.add_command(whoami_handler, name='whoami')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
