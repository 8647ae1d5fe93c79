import click
import json

from ..cli_utils import pass_taggr


def _redacted(config):
    shown = json.loads(json.dumps(config))
    key = shown.get('api', {}).get('key')
    if key:
        shown['api']['key'] = key[:4] + '...' if len(key) > 8 else '***'
    return shown


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@pass_taggr
def show_config(taggr, pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format) with the API key
    redacted. Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    from taggr.config import get_config_path

    if path:
        config_path = get_config_path()
        print(json.dumps({"config_path": str(config_path)}))
        return

    config = _redacted(taggr.config)

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))
