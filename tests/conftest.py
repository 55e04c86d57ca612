import itertools
import threading
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

import config as app_config
from bitsa import create_app, db
from bitsa.models.enums import EventStatus, UserRole
from bitsa.models.event import Event
from bitsa.models.user import User
from bitsa.utils.datetime_utils import utcnow

_seq = itertools.count(1)


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Test app on a SQLite file so requests and the test share one database."""
    db_path = tmp_path / "test_bitsa_events.db"
    monkeypatch.setattr(
        app_config.TestingConfig, "SQLALCHEMY_DATABASE_URI", f"sqlite:///{db_path}"
    )

    _app = create_app("testing")

    # The context stays pushed for the whole test; client requests reuse it
    with _app.app_context():
        db.create_all()
        yield _app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def headers_for(user):
    token = create_access_token(identity=str(user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_of(app):
    return headers_for


@pytest.fixture
def make_user(app):
    def _make(role=UserRole.STUDENT, name=None, password="password123", **extra):
        n = next(_seq)
        user = User()
        user.student_id = extra.pop("student_id", f"BIT{n:04d}")
        user.name = name or f"Member {n}"
        user.email = extra.pop("email", f"member{n}@bitsa.test")
        user.role = role
        for key, value in extra.items():
            setattr(user, key, value)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN, name="Admin User")


@pytest.fixture
def student(make_user):
    return make_user(name="Jane Student")


@pytest.fixture
def auth_headers(admin):
    """Bearer headers for an admin."""
    return headers_for(admin)


@pytest.fixture
def student_headers(student):
    return headers_for(student)


@pytest.fixture
def make_event(app, admin):
    """Insert an event directly; defaults to one starting in a week."""

    def _make(title=None, starts_in=timedelta(days=7), duration=timedelta(hours=3),
              **extra):
        n = next(_seq)
        now = utcnow()
        event = Event()
        event.title = title or f"Event {n}"
        event.slug = extra.pop("slug", f"event-{n}")
        event.description = "An association event"
        event.location = "Main Hall"
        event.event_type = extra.pop("event_type", "WORKSHOP")
        event.start_date = now + starts_in
        event.end_date = event.start_date + duration
        event.created_by_id = admin.id
        if event.start_date > now:
            event.status = EventStatus.UPCOMING
        elif event.end_date < now:
            event.status = EventStatus.COMPLETED
        else:
            event.status = EventStatus.ONGOING
        for key, value in extra.items():
            setattr(event, key, value)
        db.session.add(event)
        db.session.commit()
        return event

    return _make


@pytest.fixture
def run_concurrently(app):
    """
    Run ``target(i)`` for ``i in range(count)`` on threads released together.

    Each worker has its own app context, hence its own session and
    connection. Returns one outcome per worker: ``"ok"`` or the message of
    the error it raised.
    """

    def _run(count, target):
        barrier = threading.Barrier(count)
        outcomes = []

        def worker(i):
            with app.app_context():
                barrier.wait()
                try:
                    target(i)
                    outcomes.append("ok")
                except Exception as e:
                    outcomes.append(getattr(e, "message", repr(e)))
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return outcomes

    return _run
