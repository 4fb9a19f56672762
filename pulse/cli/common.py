"""Helpers shared by the CLI sub-commands."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Generator, NoReturn

import click

from pulse.errors import PulseError


@contextmanager
def open_database(ctx: click.Context) -> Generator:
    """Yield ``(config, db)`` with the schema applied."""
    from pulse.config.loader import load_config, resolve_path
    from pulse.storage.database import Database
    from pulse.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))
    db_path = resolve_path(config.database.path)
    with Database(db_path, busy_timeout_ms=config.database.busy_timeout_ms) as db:
        ensure_schema(db)
        yield config, db


def fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    raise SystemExit(1)


@contextmanager
def reporting_errors() -> Generator[None, None, None]:
    """Turn domain errors into a one-line message and exit code 1."""
    try:
        yield
    except PulseError as e:
        fail(f"Error: {e}")


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from None


def echo_outcome(outcome) -> None:
    """Print the health recalculation that followed an event."""
    if outcome.recalc_error:
        click.echo(f"  Warning: health recalculation failed: {outcome.recalc_error}", err=True)
        return
    health = outcome.health
    if health is None:
        return
    line = f"  Health score: {health['health_score']} ({health['status']})"
    if health["status_changed"]:
        line += f"  [was {health['previous_status']}]"
    click.echo(line)
