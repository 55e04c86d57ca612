from sqlalchemy import func

from bitsa import db
from bitsa.models.enums import EventStatus, RegistrationStatus
from bitsa.models.event import Event
from bitsa.models.event_registration import EventRegistration
from bitsa.models.submission import RegistrationSubmission


def get_event_stats(limit=5):
    """Admin overview: totals per status, most popular and most recent events."""
    by_status = dict(
        db.session.query(Event.status, func.count(Event.id)).group_by(Event.status).all()
    )
    total_events = sum(by_status.values())

    total_registrations = db.session.query(func.count(EventRegistration.id)).scalar() or 0
    total_submissions = db.session.query(func.count(RegistrationSubmission.id)).scalar() or 0

    registrations = func.count(EventRegistration.id).label("registrations")
    popular_rows = (
        db.session.query(Event, registrations)
        .outerjoin(EventRegistration, EventRegistration.event_id == Event.id)
        .group_by(Event.id)
        .order_by(registrations.desc(), Event.start_date.desc())
        .limit(limit)
        .all()
    )
    most_popular = [
        {**event.summary(), "registrations_count": count} for event, count in popular_rows
    ]

    recent = (
        Event.query.order_by(Event.created_at.desc(), Event.id.desc()).limit(limit).all()
    )
    recent_events = []
    for event in recent:
        item = event.summary()
        item["created_by"] = event.created_by.name if event.created_by else None
        recent_events.append(item)

    return {
        "stats": {
            "total_events": total_events,
            "upcoming_events": by_status.get(EventStatus.UPCOMING, 0),
            "ongoing_events": by_status.get(EventStatus.ONGOING, 0),
            "completed_events": by_status.get(EventStatus.COMPLETED, 0),
            "cancelled_events": by_status.get(EventStatus.CANCELLED, 0),
            "total_registrations": total_registrations,
            "total_submissions": total_submissions,
        },
        "most_popular_events": most_popular,
        "recent_events": recent_events,
    }


def get_student_dashboard(user_id):
    base = db.session.query(func.count(EventRegistration.id)).filter(
        EventRegistration.user_id == user_id
    )

    total = base.scalar() or 0
    attended = base.filter(EventRegistration.status == RegistrationStatus.ATTENDED).scalar() or 0
    upcoming = (
        base.join(Event, EventRegistration.event_id == Event.id)
        .filter(
            EventRegistration.status == RegistrationStatus.REGISTERED,
            Event.status == EventStatus.UPCOMING,
        )
        .scalar()
        or 0
    )

    status_rows = (
        db.session.query(EventRegistration.status, func.count(EventRegistration.id))
        .filter(EventRegistration.user_id == user_id)
        .group_by(EventRegistration.status)
        .all()
    )
    type_rows = (
        db.session.query(Event.event_type, func.count(EventRegistration.id))
        .join(EventRegistration, EventRegistration.event_id == Event.id)
        .filter(EventRegistration.user_id == user_id)
        .group_by(Event.event_type)
        .all()
    )

    return {
        "stats": {
            "total_registrations": total,
            "attended_events": attended,
            "upcoming_events": upcoming,
        },
        "status_breakdown": {status.value: count for status, count in status_rows},
        "events_by_type": [
            {"event_type": event_type, "count": count} for event_type, count in type_rows
        ],
    }
