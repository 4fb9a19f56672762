"""Project and user CLI commands."""

from __future__ import annotations

import click

from pulse.cli.common import (
    fail,
    open_database,
    parse_date,
    reporting_errors,
)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@click.group("user")
def user_group() -> None:
    """Manage users."""
    pass


@user_group.command("add")
@click.argument("name")
@click.argument("email")
@click.option(
    "--role",
    type=click.Choice(["ADMIN", "EMPLOYEE", "CLIENT"], case_sensitive=False),
    default="EMPLOYEE",
    show_default=True,
)
@click.pass_context
def user_add(ctx: click.Context, name: str, email: str, role: str) -> None:
    """Register a user."""
    import sqlite3

    from pulse.storage.queries import insert_user

    with open_database(ctx) as (_, db):
        try:
            with db.transaction():
                user_id = insert_user(db, name, email, role.upper())
        except sqlite3.IntegrityError:
            fail(f"A user with email {email} already exists.")
    click.echo(f"Added user {user_id}: {name} <{email}> ({role.upper()})")


@user_group.command("list")
@click.option("--role", default=None, help="Filter by role")
@click.pass_context
def user_list(ctx: click.Context, role: str | None) -> None:
    """List users."""
    from pulse.storage.queries import list_users

    with open_database(ctx) as (_, db):
        users = list_users(db, role.upper() if role else None)

    if not users:
        click.echo("No users found.")
        return
    for u in users:
        click.echo(f"  {u['id']:4d}  {u['name']:24s} {u['role']:9s} {u['email']}")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@click.group("project")
def project_group() -> None:
    """Manage projects and their health."""
    pass


@project_group.command("add")
@click.argument("name")
@click.option("--admin", "admin_id", type=int, required=True, help="Administrator user ID")
@click.option("--client", "client_id", type=int, default=None, help="Client user ID")
@click.option("--start", "start", required=True, help="Start date (YYYY-MM-DD)")
@click.option("--end", "end", required=True, help="End date (YYYY-MM-DD)")
@click.option("--description", default=None)
@click.option("--employee", "employee_ids", type=int, multiple=True, help="Assign an employee")
@click.pass_context
def project_add(
    ctx: click.Context,
    name: str,
    admin_id: int,
    client_id: int | None,
    start: str,
    end: str,
    description: str | None,
    employee_ids: tuple[int, ...],
) -> None:
    """Create a project (starts at health 100, ON_TRACK)."""
    from pulse.events import create_project

    start_date, end_date = parse_date(start), parse_date(end)
    with open_database(ctx) as (_, db), reporting_errors():
        project_id = create_project(
            db, name, start_date, end_date, admin_id,
            client_id=client_id, description=description,
            employee_ids=list(employee_ids),
        )
    click.echo(f"Created project {project_id}: {name}")


@project_group.command("list")
@click.option("--status", default=None, help="Filter by status")
@click.pass_context
def project_list(ctx: click.Context, status: str | None) -> None:
    """List projects with their health."""
    from pulse.storage.queries import list_projects

    with open_database(ctx) as (_, db):
        projects = list_projects(db, status.upper() if status else None)

    if not projects:
        click.echo("No projects found.")
        return
    click.echo(f"  {'ID':>4s}  {'Name':24s} {'Health':>6s}  Status")
    for p in projects:
        click.echo(f"  {p['id']:4d}  {p['name']:24s} {p['health_score']:6d}  {p['status']}")


@project_group.command("show")
@click.argument("project_id", type=int)
@click.pass_context
def project_show(ctx: click.Context, project_id: int) -> None:
    """Show a project's health and open risks."""
    from pulse.storage.queries import get_project, list_risks

    with open_database(ctx) as (_, db):
        project = get_project(db, project_id)
        if project is None:
            fail(f"Project {project_id} not found.")
        risks = list_risks(db, project_id)

    click.echo(f"{project['name']} (#{project['id']})")
    click.echo(f"  Status: {project['status']}")
    click.echo(f"  Health score: {project['health_score']}")
    click.echo(f"  Schedule: {project['start_date']} -> {project['end_date']}")
    open_risks = [r for r in risks if r["status"] == "OPEN"]
    if open_risks:
        click.echo(f"  Open risks ({len(open_risks)}):")
        for r in open_risks:
            click.echo(f"    [{r['severity']}] #{r['id']} {r['title']}")


@project_group.command("recalc")
@click.argument("project_id", type=int)
@click.pass_context
def project_recalc(ctx: click.Context, project_id: int) -> None:
    """Recalculate a project's health score now."""
    from pulse.engine.scorer import score_project
    from pulse.storage.store import SqliteHealthStore

    with open_database(ctx) as (config, db), reporting_errors():
        result = score_project(SqliteHealthStore(db), project_id, config)

    if not result["found"]:
        fail(f"Project {project_id} not found.")

    click.echo(f"Project {project_id}: health {result['health_score']} ({result['status']})")
    for name, value in result["sub_scores"].items():
        click.echo(f"  {name:14s} {value:6.1f}")
    if result["status_changed"]:
        click.echo(f"  Status changed from {result['previous_status']} to {result['status']}")


@project_group.command("complete")
@click.argument("project_id", type=int)
@click.option("--user", "user_id", type=int, default=None, help="Acting user ID")
@click.pass_context
def project_complete(ctx: click.Context, project_id: int, user_id: int | None) -> None:
    """Mark a project COMPLETED."""
    from pulse.events import complete_project

    with open_database(ctx) as (_, db), reporting_errors():
        changed = complete_project(db, project_id, user_id)

    if changed:
        click.echo(f"Project {project_id} marked COMPLETED.")
    else:
        click.echo(f"Project {project_id} is already COMPLETED.")


@project_group.command("activity")
@click.argument("project_id", type=int)
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def project_activity(ctx: click.Context, project_id: int, limit: int) -> None:
    """Show a project's activity log, most recent first."""
    from pulse.storage.queries import list_activity

    with open_database(ctx) as (_, db):
        entries = list_activity(db, project_id, limit)

    if not entries:
        click.echo("No activity yet.")
        return
    for e in entries:
        click.echo(f"  {e['created_at'][:16]}  {e['type']:24s} {e['title']}")
