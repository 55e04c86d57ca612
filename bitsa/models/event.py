from sqlalchemy import func
from bitsa import db
from bitsa.models.enums import EventStatus, RegistrationStatus


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(220), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False)
    cover_image = db.Column(db.String(500))
    location = db.Column(db.String(200), nullable=False)
    event_type = db.Column(db.String(50), nullable=False)
    start_date = db.Column(db.DateTime, nullable=False, index=True)
    end_date = db.Column(db.DateTime, nullable=False)
    registration_deadline = db.Column(db.DateTime)
    max_attendees = db.Column(db.Integer)
    status = db.Column(
        db.Enum(EventStatus, name="event_status"),
        default=EventStatus.UPCOMING,
        nullable=False,
        index=True,
    )
    requires_registration = db.Column(db.Boolean, default=False, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
    )

    created_by = db.relationship("User", lazy=True)
    registrations = db.relationship(
        "EventRegistration", backref="event", lazy=True, cascade="all, delete-orphan"
    )
    registration_form = db.relationship(
        "RegistrationForm",
        back_populates="event",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Event {self.slug}>"

    @property
    def is_cancelled(self):
        return self.status == EventStatus.CANCELLED

    @property
    def registrations_count(self):
        """Registrations currently holding a seat."""
        from bitsa.models.event_registration import EventRegistration

        return (
            db.session.query(func.count(EventRegistration.id))
            .filter(
                EventRegistration.event_id == self.id,
                EventRegistration.status != RegistrationStatus.CANCELLED,
            )
            .scalar()
            or 0
        )

    @property
    def available_slots(self):
        if self.max_attendees is None:
            return None
        return max(self.max_attendees - self.registrations_count, 0)

    @property
    def is_full(self):
        return self.max_attendees is not None and self.registrations_count >= self.max_attendees

    def summary(self):
        from bitsa.utils.datetime_utils import safe_iso

        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "start_date": safe_iso(self.start_date),
            "end_date": safe_iso(self.end_date),
            "location": self.location,
            "status": self.status.value if self.status else None,
        }
