"""Maintenance commands, available as ``flask <command>``."""

import click
from flask.cli import with_appcontext
from sqlalchemy import or_

from bitsa import db
from bitsa.models.enums import UserRole
from bitsa.models.user import User


def register_commands(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(refresh_event_status)


@click.command("create-admin")
@click.option("--student-id", default="ADMIN001", show_default=True)
@click.option("--email", default="admin@bitsa.local", show_default=True)
@click.option("--name", default="Administrator", show_default=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin(student_id, email, name, password):
    """Create the super admin account if it does not exist yet."""
    existing = User.query.filter(
        or_(User.student_id == student_id, User.email == email.lower())
    ).first()
    if existing:
        click.echo(f"User {existing.student_id} already exists")
        return

    if len(password) < 8:
        raise click.BadParameter("must be at least 8 characters", param_hint="--password")

    admin = User()
    admin.student_id = student_id
    admin.email = email.lower()
    admin.name = name
    admin.role = UserRole.SUPER_ADMIN
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()

    click.echo(f"Admin {student_id} created")


@click.command("refresh-event-status")
@click.option("--now", "now_value", default=None,
              help="Reference time (ISO 8601, APP_TIMEZONE when naive).")
@with_appcontext
def refresh_event_status(now_value):
    """Recompute the stored status of every non-cancelled event."""
    from bitsa.services.event_service import refresh_event_statuses
    from bitsa.utils.datetime_utils import parse_datetime
    from bitsa.utils.errors import ValidationError

    try:
        now = parse_datetime(now_value)
    except ValidationError as e:
        raise click.BadParameter(e.message, param_hint="--now")

    changed = refresh_event_statuses(now=now)
    click.echo(f"{changed} event(s) updated")
