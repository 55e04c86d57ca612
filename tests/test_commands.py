from datetime import timedelta

from bitsa import db
from bitsa.models.enums import EventStatus, UserRole
from bitsa.models.user import User


def test_create_admin(runner):
    result = runner.invoke(
        args=["create-admin", "--student-id", "ADM01", "--email", "Root@Bitsa.test",
              "--password", "supersecret"]
    )
    assert result.exit_code == 0
    assert "Admin ADM01 created" in result.output

    admin = User.query.filter_by(student_id="ADM01").one()
    assert admin.role == UserRole.SUPER_ADMIN
    assert admin.email == "root@bitsa.test"
    assert admin.check_password("supersecret")


def test_create_admin_is_idempotent(runner):
    args = ["create-admin", "--student-id", "ADM01", "--password", "supersecret"]
    runner.invoke(args=args)
    result = runner.invoke(args=args)

    assert "already exists" in result.output
    assert User.query.filter_by(student_id="ADM01").count() == 1


def test_create_admin_rejects_short_password(runner):
    result = runner.invoke(args=["create-admin", "--password", "short"])
    assert result.exit_code != 0
    assert User.query.count() == 0


def test_refresh_event_status(runner, make_event):
    finished = make_event(starts_in=-timedelta(days=3))
    finished.status = EventStatus.UPCOMING
    cancelled = make_event(starts_in=-timedelta(days=3), status=EventStatus.CANCELLED)
    db.session.commit()

    result = runner.invoke(args=["refresh-event-status"])

    assert result.exit_code == 0
    assert "1 event(s) updated" in result.output
    db.session.expire_all()
    assert finished.status == EventStatus.COMPLETED
    assert cancelled.status == EventStatus.CANCELLED


def test_refresh_event_status_with_reference_time(runner, make_event):
    event = make_event(starts_in=timedelta(days=2))
    at = (event.start_date + timedelta(hours=1)).isoformat()

    result = runner.invoke(args=["refresh-event-status", "--now", at])

    assert result.exit_code == 0
    db.session.expire_all()
    assert event.status == EventStatus.ONGOING


def test_refresh_event_status_rejects_bad_time(runner):
    result = runner.invoke(args=["refresh-event-status", "--now", "soon"])
    assert result.exit_code != 0
