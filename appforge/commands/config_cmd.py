"""CLI handlers for config commands."""

from __future__ import annotations

import json

import click

from appforge.config import DEFAULT_CONFIG_PATH, init_config, load_config


def _coerce(value: str):
    """Best-effort conversion of a CLI string to a TOML value."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        pass
    if value.startswith("[") or value.startswith("{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def config_init(force: bool):
    """Create default configuration file."""
    if DEFAULT_CONFIG_PATH.exists() and not force:
        click.echo(f"Config already exists at {DEFAULT_CONFIG_PATH} (use --force to overwrite)", err=True)
        return
    path = init_config()
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
def config_show():
    """Show current configuration."""
    config = load_config()
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  MongoDB: {config.mongodb.uri}/{config.mongodb.database}")
    click.echo(
        f"  Agent: {config.agent.provider}/{config.agent.model} "
        f"(temperature={config.agent.temperature}, max_iterations={config.agent.max_iterations}, "
        f"history={config.agent.history_limit})"
    )
    click.echo(f"  Summarizer: {config.summarizer.provider}/{config.summarizer.model}")
    sandbox_key = "configured" if config.sandbox.api_key else "not set"
    click.echo(
        f"  Sandbox: template={config.sandbox.template}, timeout={config.sandbox.timeout}s, "
        f"port={config.sandbox.port}, key={sandbox_key}"
    )
    click.echo(f"  Jobs: max_attempts={config.jobs.max_attempts}, retry_base_delay={config.jobs.retry_base_delay}s")

    click.echo("\n  Providers:")
    for name, prov in config.providers.items():
        has_key = "configured" if prov.api_key else "not set"
        click.echo(f"    {name}: model={prov.default_model}, key={has_key}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value.

    Modifies the TOML config file. Key uses dot notation, e.g.:
    agent.model, sandbox.template, jobs.max_attempts
    """
    import tomli_w

    path = DEFAULT_CONFIG_PATH
    if not path.exists():
        click.echo("No config file found. Run 'appforge config init' first.", err=True)
        return

    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Navigate dot-separated key
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        target = target.setdefault(part, {})

    target[parts[-1]] = _coerce(value)

    with open(path, "wb") as f:
        tomli_w.dump(data, f)

    click.echo(f"Set {key} = {value}")
