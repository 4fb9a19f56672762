"""Top-level CLI entry point for ProjectPulse."""

from __future__ import annotations

import logging

import click

from pulse import __version__


@click.group()
@click.version_option(version=__version__, prog_name="pulse")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="PULSE_CONFIG",
    help="Path to pulse.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """ProjectPulse -- project health tracking."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from pulse.cli.config_cmd import config_group  # noqa: E402
from pulse.cli.notify_cmd import notifications_group  # noqa: E402
from pulse.cli.project_cmd import project_group, user_group  # noqa: E402
from pulse.cli.signal_cmd import checkin_cmd, feedback_cmd, risk_group  # noqa: E402

cli.add_command(checkin_cmd, "checkin")
cli.add_command(config_group, "config")
cli.add_command(feedback_cmd, "feedback")
cli.add_command(notifications_group, "notifications")
cli.add_command(project_group, "project")
cli.add_command(risk_group, "risk")
cli.add_command(user_group, "user")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize ProjectPulse: create the database and apply migrations."""
    from pulse.cli.common import open_database

    with open_database(ctx) as (_, db):
        click.echo(f"  Database: {db.path}")
        click.echo(f"  Schema version: {db.schema_version()}")

    click.echo("\nProjectPulse initialized successfully.")
    click.echo("Next steps:")
    click.echo("  1. Run: pulse user add 'Ada Admin' ada@example.com --role ADMIN")
    click.echo("  2. Run: pulse project add Website --admin 1 --start 2026-01-05 --end 2026-06-30")
    click.echo("  3. Run: pulse project recalc 1")
