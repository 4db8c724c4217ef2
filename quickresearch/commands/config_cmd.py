"""CLI handlers for config commands."""

from __future__ import annotations

import json

import click
import tomli_w

from quickresearch.commands._helpers import get_config
from quickresearch.config import DEFAULT_CONFIG_PATH, init_config

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


def _config_path(ctx: click.Context):
    obj = ctx.find_root().obj or {}
    return obj.get("config_path") or DEFAULT_CONFIG_PATH


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
@click.pass_context
def config_init(ctx):
    """Create default configuration file."""
    path = init_config(_config_path(ctx))
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Show current configuration."""
    config = get_config(ctx)
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  Default provider: {config.research.default_provider}")
    temperature = config.research.temperature
    click.echo(f"  Temperature: {temperature if temperature is not None else 'provider default'}")
    click.echo(f"  Max depth: {config.research.max_depth}, max branches: {config.research.max_branches}")

    click.echo("\n  Providers:")
    for name, prov in config.providers.items():
        has_key = "configured" if prov.api_key else "not set"
        click.echo(f"    {name}: model={prov.default_model}, key={has_key} (env {prov.api_key_env or '-'})")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Set a configuration value.

    Modifies the TOML config file. Key uses dot notation, e.g.:
    research.default_provider, providers.gemini.default_model
    """
    if key.endswith("api_key"):
        click.echo("API keys are not stored in the config file; set api_key_env instead.", err=True)
        raise SystemExit(1)

    path = _config_path(ctx)
    if not path.exists():
        click.echo("No config file found. Run 'quickresearch config init' first.", err=True)
        raise SystemExit(1)

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Navigate dot-separated key
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        target = target.setdefault(part, {})

    final_key = parts[-1]
    if value.lower() in ("true", "false"):
        target[final_key] = value.lower() == "true"
    elif value.isdigit():
        target[final_key] = int(value)
    else:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value
        target[final_key] = parsed if isinstance(parsed, (float, list, dict)) else value

    with open(path, "wb") as f:
        tomli_w.dump(data, f)

    click.echo(f"Set {key} = {value}")
