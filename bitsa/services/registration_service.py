from flask import current_app
from sqlalchemy.exc import IntegrityError

from bitsa import db
from bitsa.models.enums import EventStatus, RegistrationStatus
from bitsa.models.event import Event
from bitsa.models.event_registration import EventRegistration
from bitsa.utils.audit import log_activity
from bitsa.utils.datetime_utils import utcnow
from bitsa.utils.errors import Conflict, Forbidden, NotFound, PreconditionFailed


def lock_event(event_id):
    """
    Load an event holding a write lock on its row until commit/rollback.

    PostgreSQL and MySQL get ``SELECT ... FOR UPDATE``. Other dialects
    (SQLite) ignore FOR UPDATE, so a no-op UPDATE of the row is issued
    instead: it takes the database write lock, which serializes concurrent
    check-then-insert sequences the same way.

    Seats must then be counted with :func:`count_locked`. Under MySQL's
    REPEATABLE READ a plain ``COUNT(*)`` reads the snapshot taken at the
    transaction's first read (the user lookup), so after waiting on the lock
    it would miss the rows the previous holder just committed.
    """
    session = db.session
    if session.get_bind().dialect.name in ("postgresql", "mysql"):
        return session.execute(
            db.select(Event).where(Event.id == event_id).with_for_update()
        ).scalar_one_or_none()

    session.execute(
        db.update(Event)
        .where(Event.id == event_id)
        .values(updated_at=Event.updated_at)
        .execution_options(synchronize_session=False)
    )
    return session.get(Event, event_id)


def count_locked(column, *criteria):
    """
    Count rows matching ``criteria`` with a locking read.

    ``FOR UPDATE`` reads the latest committed rows instead of the
    transaction snapshot. PostgreSQL refuses it next to an aggregate, so the
    ids are fetched and counted here. SQLite drops the clause.
    """
    stmt = db.select(column).where(*criteria).with_for_update()
    return len(db.session.execute(stmt).scalars().all())


def ensure_open_for_registration(event, now=None):
    """Reject cancelled, finished or past-deadline events."""
    now = now or utcnow()
    if event.is_cancelled:
        raise PreconditionFailed("This event has been cancelled")
    if event.status == EventStatus.COMPLETED or now > event.end_date:
        raise PreconditionFailed("Registration closed - event has ended")
    if event.registration_deadline and now > event.registration_deadline:
        raise PreconditionFailed("Registration deadline has passed")


def _active_registrations(event_id):
    return count_locked(
        EventRegistration.id,
        EventRegistration.event_id == event_id,
        EventRegistration.status != RegistrationStatus.CANCELLED,
    )


def register_simple(event_id, user_id):
    """
    Direct RSVP to an event (no form).

    The capacity count and the insert run in one transaction after the
    event row is locked, so concurrent requests cannot overbook. The
    (event, user) unique constraint turns a racing duplicate into Conflict.

    Raises:
        NotFound: event does not exist
        Conflict: user already registered
        PreconditionFailed: cancelled, ended, deadline passed or full
    """
    try:
        event = lock_event(event_id)
        if not event:
            raise NotFound("Event not found")

        existing = EventRegistration.query.filter_by(
            event_id=event_id, user_id=user_id
        ).first()
        if existing:
            raise Conflict("You are already registered for this event")

        ensure_open_for_registration(event)

        if event.max_attendees is not None:
            if _active_registrations(event_id) >= event.max_attendees:
                raise PreconditionFailed("Event is full - maximum capacity reached")

        registration = EventRegistration()
        registration.event_id = event_id
        registration.user_id = user_id
        registration.status = RegistrationStatus.REGISTERED
        db.session.add(registration)
        db.session.flush()

        log_activity(user_id, "REGISTER_EVENT", "EventRegistration", registration.id,
                     f"Registered for event: {event.title}")
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("You are already registered for this event")
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("User %s registered for event %s", user_id, event_id)
    return registration


def cancel_registration(registration_id, user):
    """Hard-delete a registration. Owners cancel their own; admins any."""
    registration = db.session.get(EventRegistration, registration_id)
    if not registration:
        raise NotFound("Registration not found")

    if registration.user_id != user.id and not user.is_admin:
        raise Forbidden("You can only cancel your own registrations")

    title = registration.event.title if registration.event else ""
    db.session.delete(registration)
    log_activity(user.id, "CANCEL_REGISTRATION", "EventRegistration", registration_id,
                 f"Cancelled registration for event: {title}")
    db.session.commit()


def update_registration_status(registration_id, status, actor_id):
    registration = db.session.get(EventRegistration, registration_id)
    if not registration:
        raise NotFound("Registration not found")

    registration.status = RegistrationStatus(status)
    log_activity(actor_id, "UPDATE_ATTENDANCE", "EventRegistration", registration.id,
                 f"Updated attendance status to {registration.status.value}")
    db.session.commit()
    return registration


def list_event_registrations(event_id):
    if not db.session.get(Event, event_id):
        raise NotFound("Event not found")
    return (
        EventRegistration.query.filter_by(event_id=event_id)
        .order_by(EventRegistration.created_at.desc(), EventRegistration.id.desc())
        .all()
    )


def list_user_registrations(user_id):
    """A member's registrations, split the way the student dashboard shows them."""
    registrations = (
        EventRegistration.query.filter_by(user_id=user_id)
        .order_by(EventRegistration.created_at.desc(), EventRegistration.id.desc())
        .all()
    )

    upcoming = [
        r for r in registrations
        if r.status == RegistrationStatus.REGISTERED
        and r.event.status == EventStatus.UPCOMING
    ]
    attended = [r for r in registrations if r.status == RegistrationStatus.ATTENDED]
    cancelled = [r for r in registrations if r.status == RegistrationStatus.CANCELLED]

    return {
        "all": registrations,
        "upcoming": upcoming,
        "attended": attended,
        "cancelled": cancelled,
    }
