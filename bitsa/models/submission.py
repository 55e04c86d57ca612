from bitsa import db
from bitsa.models.enums import SubmissionStatus


class RegistrationSubmission(db.Model):
    __tablename__ = "registration_submissions"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(
        db.Integer,
        db.ForeignKey("registration_forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Always equal to form.event_id; kept for event-level queries
    event_id = db.Column(
        db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    # {"<field id>": value}
    responses = db.Column(db.JSON, nullable=False, default=dict)
    status = db.Column(
        db.Enum(SubmissionStatus, name="submission_status"),
        default=SubmissionStatus.PENDING,
        nullable=False,
    )
    approved_by_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    approved_at = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)
    attended = db.Column(db.Boolean, nullable=True)
    attendance_marked_by_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    attendance_marked_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False
    )

    form = db.relationship("RegistrationForm", back_populates="submissions")
    event = db.relationship("Event", lazy=True)
    user = db.relationship("User", foreign_keys=[user_id], lazy=True)

    __table_args__ = (
        db.UniqueConstraint("form_id", "user_id", name="uq_submission_form_user"),
        db.Index("ix_submission_event_status", "event_id", "status"),
    )

    def __repr__(self):
        return f"<RegistrationSubmission Form:{self.form_id} User:{self.user_id}>"
