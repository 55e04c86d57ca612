"""Event lifecycle: status derivation, slugs, create/update/cancel, listing."""

from flask import current_app
from sqlalchemy import asc, desc, or_
from sqlalchemy.exc import IntegrityError

from bitsa import db
from bitsa.models.category import Category
from bitsa.models.enums import EventStatus
from bitsa.models.event import Event
from bitsa.utils.audit import log_activity
from bitsa.utils.datetime_utils import utcnow
from bitsa.utils.errors import Conflict, NotFound, ValidationError
from bitsa.utils.slug_utils import generate_unique_slug, slugify

EVENT_FIELDS = (
    "title",
    "description",
    "cover_image",
    "location",
    "event_type",
    "start_date",
    "end_date",
    "registration_deadline",
    "max_attendees",
    "category_id",
)

SORTABLE_FIELDS = ("id", "title", "start_date", "end_date", "created_at", "status")


def compute_event_status(now, start_date, end_date, current=None):
    """
    Derive the lifecycle status of an event from its time window.

    CANCELLED is absorbing: once an event is cancelled no recomputation
    brings it back.
    """
    if current == EventStatus.CANCELLED:
        return EventStatus.CANCELLED
    if now < start_date:
        return EventStatus.UPCOMING
    if now > end_date:
        return EventStatus.COMPLETED
    return EventStatus.ONGOING


def _validate_window(start_date, end_date, registration_deadline=None):
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date cannot be before start date")
    if registration_deadline and end_date and registration_deadline > end_date:
        raise ValidationError("Registration deadline cannot be after the end date")


def _ensure_category(category_id):
    if category_id is not None and not db.session.get(Category, category_id):
        raise NotFound("Category not found")


def _save_with_unique_slug(build, title):
    """
    Run ``build()`` to get a pending Event, give it a slug for ``title`` and
    commit.

    The slug is computed from what is committed now; a concurrent writer can
    still take the same one first, in which case the unique index rejects
    our insert and the whole unit is rebuilt with a fresh slug.
    """
    attempts = current_app.config.get("SLUG_MAX_ATTEMPTS", 5)
    for attempt in range(1, attempts + 1):
        event, finalize = build()
        event.slug = generate_unique_slug(db.session, Event, title, column="slug")
        db.session.add(event)
        try:
            db.session.flush()
            finalize(event)
            db.session.commit()
            return event
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning(
                "Slug collision for %r (attempt %s/%s)", title, attempt, attempts
            )
    raise Conflict("Could not generate a unique slug for this event, please retry")


def create_event(data, creator_id):
    """
    Create an event. ``data`` is the loaded event schema payload.

    Raises:
        ValidationError: end date before start date
        NotFound: unknown category
        Conflict: slug could not be reserved
    """
    _validate_window(data.get("start_date"), data.get("end_date"),
                     data.get("registration_deadline"))
    _ensure_category(data.get("category_id"))

    def build():
        event = Event()
        for key in EVENT_FIELDS:
            if key in data:
                setattr(event, key, data[key])
        event.created_by_id = creator_id
        event.status = compute_event_status(utcnow(), event.start_date, event.end_date)

        def finalize(ev):
            log_activity(creator_id, "CREATE_EVENT", "Event", ev.id,
                         f"Created event: {ev.title}")

        return event, finalize

    event = _save_with_unique_slug(build, data["title"])
    current_app.logger.info("Event %s created by user %s", event.slug, creator_id)
    return event


def get_event(event_id):
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def get_event_by_slug(slug):
    event = Event.query.filter_by(slug=slug).first()
    if not event:
        raise NotFound("Event not found")
    return event


def update_event(event_id, patch, actor_id):
    """
    Apply a partial update and recompute the status from the merged dates.

    A cancelled event stays cancelled whatever the patch contains.
    """
    event = get_event(event_id)

    start = patch.get("start_date", event.start_date)
    end = patch.get("end_date", event.end_date)
    deadline = patch.get("registration_deadline", event.registration_deadline)
    _validate_window(start, end, deadline)
    if "category_id" in patch:
        _ensure_category(patch["category_id"])

    # Only a different base slug needs a new one
    title_changed = "title" in patch and slugify(patch["title"]) != slugify(event.title)

    def apply(ev):
        for key in EVENT_FIELDS:
            if key in patch:
                setattr(ev, key, patch[key])
        ev.status = compute_event_status(utcnow(), ev.start_date, ev.end_date, ev.status)

    if title_changed:
        def build():
            ev = get_event(event_id)
            apply(ev)

            def finalize(saved):
                log_activity(actor_id, "UPDATE_EVENT", "Event", saved.id,
                             f"Updated event: {saved.title}")

            return ev, finalize

        return _save_with_unique_slug(build, patch["title"])

    apply(event)
    log_activity(actor_id, "UPDATE_EVENT", "Event", event.id, f"Updated event: {event.title}")
    db.session.commit()
    return event


def cancel_event(event_id, actor_id):
    """
    Soft-delete: mark the event CANCELLED.

    Registrations and submissions are kept for history; the registration
    paths refuse cancelled events. Cancelling twice is a no-op.
    """
    event = get_event(event_id)
    if event.is_cancelled:
        return event

    event.status = EventStatus.CANCELLED
    log_activity(actor_id, "CANCEL_EVENT", "Event", event.id, f"Cancelled event: {event.title}")
    db.session.commit()
    current_app.logger.info("Event %s cancelled by user %s", event.slug, actor_id)
    return event


def list_events(filters):
    """
    Filter, sort and paginate events.

    Supported keys: status, event_type, category_id, search, date_from,
    date_to, sort ("field:asc|desc"), page, per_page.
    """
    query = Event.query

    status = filters.get("status")
    if status:
        try:
            query = query.filter(Event.status == EventStatus(status.upper()))
        except ValueError:
            raise ValidationError(f"Invalid status: {status}")

    if filters.get("event_type"):
        query = query.filter(Event.event_type == filters["event_type"])

    if filters.get("category_id"):
        query = query.filter(Event.category_id == filters["category_id"])

    search = (filters.get("search") or "").strip()
    if search:
        query = query.filter(
            or_(
                Event.title.ilike(f"%{search}%"),
                Event.description.ilike(f"%{search}%"),
                Event.location.ilike(f"%{search}%"),
            )
        )

    # Overlap with [date_from, date_to]
    if filters.get("date_from"):
        query = query.filter(Event.end_date >= filters["date_from"])
    if filters.get("date_to"):
        query = query.filter(Event.start_date <= filters["date_to"])

    sort_field, sort_order = "start_date", "desc"
    sort = filters.get("sort")
    if sort and ":" in sort:
        field, order = sort.split(":", 1)
        if field in SORTABLE_FIELDS:
            sort_field = field
        if order in ("asc", "desc"):
            sort_order = order

    column = getattr(Event, sort_field)
    query = query.order_by(asc(column) if sort_order == "asc" else desc(column), Event.id)

    page = max(filters.get("page") or 1, 1)
    per_page = filters.get("per_page") or current_app.config.get("EVENTS_PER_PAGE", 10)
    per_page = min(max(per_page, 1), 100)

    return query.paginate(page=page, per_page=per_page, error_out=False)


def refresh_event_statuses(now=None):
    """Recompute the cached status of every non-cancelled event."""
    now = now or utcnow()
    changed = 0
    events = Event.query.filter(Event.status != EventStatus.CANCELLED).all()
    for event in events:
        new_status = compute_event_status(now, event.start_date, event.end_date, event.status)
        if new_status != event.status:
            event.status = new_status
            changed += 1
    db.session.commit()
    return changed
