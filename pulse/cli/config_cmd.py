"""Config CLI commands: show, validate."""

from __future__ import annotations

import click
import yaml


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration as YAML."""
    from pulse.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    click.echo(yaml.safe_dump(config.model_dump(), sort_keys=False))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate pulse.yaml against the schema."""
    from pulse.config.loader import load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
    except Exception as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None

    w = config.scoring.weights
    click.echo("Config is valid.")
    click.echo(f"  Version: {config.version}")
    click.echo(
        f"  Weights: satisfaction={w.satisfaction:.2f}, confidence={w.confidence:.2f}, "
        f"schedule={w.schedule:.2f}, risk={w.risk:.2f}"
    )
    click.echo(f"  Signal window: {config.scoring.signal_window}")
    click.echo(
        f"  Thresholds: ON_TRACK>={config.thresholds.on_track}, "
        f"AT_RISK>={config.thresholds.at_risk}"
    )
    click.echo(f"  Database: {config.database.path}")
