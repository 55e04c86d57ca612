from bitsa import db
from bitsa.models.enums import RegistrationStatus


class EventRegistration(db.Model):
    __tablename__ = "event_registrations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(
        db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status = db.Column(
        db.Enum(RegistrationStatus, name="registration_status"),
        default=RegistrationStatus.REGISTERED,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False
    )

    user = db.relationship("User", lazy=True)

    # One RSVP per member and event; closes the check-then-insert race
    __table_args__ = (
        db.UniqueConstraint("event_id", "user_id", name="uq_event_registration_event_user"),
    )

    def __repr__(self):
        return f"<EventRegistration Event:{self.event_id} User:{self.user_id}>"
