"""Signal CLI commands: checkin, feedback, risk add/update/delete."""

from __future__ import annotations

import click

from pulse.cli.common import echo_outcome, open_database, reporting_errors

_SEVERITIES = click.Choice(["LOW", "MEDIUM", "HIGH"], case_sensitive=False)
_RISK_STATUSES = click.Choice(["OPEN", "RESOLVED"], case_sensitive=False)


@click.command("checkin")
@click.argument("project_id", type=int)
@click.option("--employee", "employee_id", type=int, required=True, help="Employee user ID")
@click.option("--confidence", type=click.IntRange(1, 5), required=True, help="Confidence 1-5")
@click.option("--completion", type=click.IntRange(0, 100), required=True, help="Completion %")
@click.option("--summary", required=True, help="Progress summary")
@click.option("--blockers", default=None)
@click.pass_context
def checkin_cmd(
    ctx: click.Context,
    project_id: int,
    employee_id: int,
    confidence: int,
    completion: int,
    summary: str,
    blockers: str | None,
) -> None:
    """Submit this week's check-in for a project."""
    from pulse.events import submit_check_in

    with open_database(ctx) as (config, db), reporting_errors():
        outcome = submit_check_in(
            db, project_id, employee_id, confidence, completion, summary,
            blockers, config=config,
        )
    click.echo(f"Check-in {outcome.record_id} recorded.")
    echo_outcome(outcome)


@click.command("feedback")
@click.argument("project_id", type=int)
@click.option("--client", "client_id", type=int, required=True, help="Client user ID")
@click.option("--satisfaction", type=click.IntRange(1, 5), required=True)
@click.option("--communication", type=click.IntRange(1, 5), required=True)
@click.option("--comments", default=None)
@click.option("--flag", "flagged_issue", is_flag=True, help="Flag an issue")
@click.pass_context
def feedback_cmd(
    ctx: click.Context,
    project_id: int,
    client_id: int,
    satisfaction: int,
    communication: int,
    comments: str | None,
    flagged_issue: bool,
) -> None:
    """Submit this week's client feedback for a project."""
    from pulse.events import submit_feedback

    with open_database(ctx) as (config, db), reporting_errors():
        outcome = submit_feedback(
            db, project_id, client_id, satisfaction, communication,
            comments, flagged_issue, config=config,
        )
    click.echo(f"Feedback {outcome.record_id} recorded.")
    echo_outcome(outcome)


@click.group("risk")
def risk_group() -> None:
    """Manage project risks."""
    pass


@risk_group.command("add")
@click.argument("project_id", type=int)
@click.argument("title")
@click.option("--severity", type=_SEVERITIES, required=True)
@click.option("--user", "user_id", type=int, default=None, help="Reporting user ID")
@click.option("--description", default=None)
@click.option("--mitigation", default=None, help="Mitigation plan")
@click.pass_context
def risk_add(
    ctx: click.Context,
    project_id: int,
    title: str,
    severity: str,
    user_id: int | None,
    description: str | None,
    mitigation: str | None,
) -> None:
    """Record a new risk."""
    from pulse.events import create_risk

    with open_database(ctx) as (config, db), reporting_errors():
        outcome = create_risk(
            db, project_id, title, severity,
            created_by_id=user_id, description=description,
            mitigation_plan=mitigation, config=config,
        )
    click.echo(f"Risk {outcome.record_id} recorded.")
    echo_outcome(outcome)


@risk_group.command("update")
@click.argument("project_id", type=int)
@click.argument("risk_id", type=int)
@click.option("--title", default=None)
@click.option("--severity", type=_SEVERITIES, default=None)
@click.option("--status", type=_RISK_STATUSES, default=None)
@click.option("--mitigation", default=None, help="Mitigation plan")
@click.option("--user", "user_id", type=int, default=None, help="Acting user ID")
@click.pass_context
def risk_update(
    ctx: click.Context,
    project_id: int,
    risk_id: int,
    title: str | None,
    severity: str | None,
    status: str | None,
    mitigation: str | None,
    user_id: int | None,
) -> None:
    """Update a risk (e.g. --status RESOLVED)."""
    from pulse.events import update_risk

    with open_database(ctx) as (config, db), reporting_errors():
        outcome = update_risk(
            db, project_id, risk_id,
            user_id=user_id, title=title, severity=severity,
            mitigation_plan=mitigation, status=status, config=config,
        )
    click.echo(f"Risk {risk_id} updated.")
    echo_outcome(outcome)


@risk_group.command("delete")
@click.argument("project_id", type=int)
@click.argument("risk_id", type=int)
@click.pass_context
def risk_delete(ctx: click.Context, project_id: int, risk_id: int) -> None:
    """Delete a risk."""
    from pulse.events import delete_risk

    with open_database(ctx) as (config, db), reporting_errors():
        outcome = delete_risk(db, project_id, risk_id, config=config)
    click.echo(f"Risk {risk_id} deleted.")
    echo_outcome(outcome)
