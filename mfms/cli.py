import json
from dataclasses import asdict

import click
from flask import current_app
from flask.cli import with_appcontext

from mfms.extensions import db
from mfms.services import reports
from mfms.services.associations import get_feedback_answers
from mfms.services.errors import WorkflowError
from mfms.services.feedback import FeedbackWorkflow
from mfms.utils.validators import parse_submission

def _emit(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))

@click.group()
def feedback():
    """Feedback submission and lookup."""

@feedback.command("submit")
@click.argument("payload", type=click.File("r"))
@with_appcontext
def feedback_submit(payload):
    """Submit a feedback request read from a JSON file ('-' for stdin)."""
    try:
        data = json.load(payload)
    except json.JSONDecodeError as ex:
        raise click.ClickException(f"Invalid JSON payload: {ex}")

    try:
        submission = parse_submission(data, current_app.config["FEEDBACK_REQUIRED_ANSWERS"])
        workflow = FeedbackWorkflow.for_session(db.session)
        workflow.run(submission)
    except WorkflowError as ex:
        raise click.ClickException(f"{type(ex).__name__}: {ex}")

    _emit({"created": True, "states": [s.value for s in workflow.states]})

@feedback.command("list")
@click.option("--employee-id", type=int)
@click.option("--device-id", type=int)
@click.option("--rating", type=float)
@click.option("--merchant-id", type=int)
@with_appcontext
def feedback_list(employee_id, device_id, rating, merchant_id):
    """List feedback; merchant beats employee beats device beats rating."""
    try:
        items = reports.list_feedback(
            db.session,
            employee_id=employee_id,
            device_id=device_id,
            rating=rating,
            merchant_id=merchant_id,
        )
    except WorkflowError as ex:
        raise click.ClickException(str(ex))
    _emit([fb.to_dict() for fb in items])

@feedback.command("answers")
@click.argument("feedback_id", type=int)
@with_appcontext
def feedback_answers(feedback_id):
    try:
        rows = get_feedback_answers(db.session, feedback_id)
    except WorkflowError as ex:
        raise click.ClickException(str(ex))
    _emit([asdict(r) for r in rows])

@click.group("reports")
def reports_group():
    """Aggregate feedback reports."""

@reports_group.command("employee-counts")
@with_appcontext
def reports_employee_counts():
    _emit([asdict(r) for r in reports.count_feedback_by_employee(db.session)])

@reports_group.command("device-averages")
@with_appcontext
def reports_device_averages():
    _emit([asdict(r) for r in reports.average_rating_by_device(db.session)])

@reports_group.command("device-counts")
@with_appcontext
def reports_device_counts():
    _emit([asdict(r) for r in reports.count_feedback_by_device(db.session)])

def register_cli(app):
    app.cli.add_command(feedback)
    app.cli.add_command(reports_group)
