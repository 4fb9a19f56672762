"""Notification inbox CLI commands."""

from __future__ import annotations

import click

from pulse.cli.common import open_database, reporting_errors


@click.group("notifications")
def notifications_group() -> None:
    """Read a user's notifications."""
    pass


@notifications_group.command("list")
@click.argument("user_id", type=int)
@click.option("--unread", is_flag=True, help="Only unread notifications")
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def notifications_list(ctx: click.Context, user_id: int, unread: bool, limit: int) -> None:
    """List a user's notifications, most recent first."""
    from pulse.inbox import list_inbox

    with open_database(ctx) as (_, db):
        inbox = list_inbox(db, user_id, unread_only=unread, limit=limit)

    click.echo(f"{inbox['unread']} unread")
    for n in inbox["notifications"]:
        marker = " " if n["is_read"] else "*"
        click.echo(f" {marker} #{n['id']:<4d} [{n['type']}] {n['title']}: {n['message']}")


@notifications_group.command("read")
@click.argument("user_id", type=int)
@click.argument("notification_id", type=int)
@click.pass_context
def notifications_read(ctx: click.Context, user_id: int, notification_id: int) -> None:
    """Mark one notification read."""
    from pulse.inbox import mark_read

    with open_database(ctx) as (_, db), reporting_errors():
        mark_read(db, user_id, notification_id)
    click.echo(f"Notification {notification_id} marked read.")


@notifications_group.command("read-all")
@click.argument("user_id", type=int)
@click.pass_context
def notifications_read_all(ctx: click.Context, user_id: int) -> None:
    """Mark all of a user's notifications read."""
    from pulse.inbox import mark_all_read

    with open_database(ctx) as (_, db):
        count = mark_all_read(db, user_id)
    click.echo(f"Marked {count} notification(s) read.")
