"""
Registration-form submissions: submit, approval workflow, attendance.

Status machine::

    PENDING ──> APPROVED | REJECTED | WAITLISTED   (admin decision)

Forms without ``requires_approval`` create submissions directly APPROVED.
Decided submissions can be moved between the three decided states, never
back to PENDING. Attendance is only tracked on APPROVED submissions.
"""

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from bitsa import db
from bitsa.models.enums import SubmissionStatus, SEAT_HOLDING_STATUSES
from bitsa.models.registration_form import RegistrationForm
from bitsa.models.submission import RegistrationSubmission
from bitsa.models.user import User
from bitsa.services.field_validators import validate_responses
from bitsa.services.form_service import get_form_by_id
from bitsa.services.registration_service import (
    count_locked,
    ensure_open_for_registration,
    lock_event,
)
from bitsa.utils.audit import log_activity
from bitsa.utils.datetime_utils import utcnow
from bitsa.utils.errors import Conflict, NotFound, PreconditionFailed, ValidationError

DECISION_STATUSES = (
    SubmissionStatus.APPROVED,
    SubmissionStatus.REJECTED,
    SubmissionStatus.WAITLISTED,
)


def get_submission(submission_id):
    submission = db.session.get(RegistrationSubmission, submission_id)
    if not submission:
        raise NotFound("Submission not found")
    return submission


def _ensure_seat_left(event):
    """Raise when PENDING and APPROVED submissions already fill the event."""
    if event.max_attendees is None:
        return
    taken = count_locked(
        RegistrationSubmission.id,
        RegistrationSubmission.event_id == event.id,
        RegistrationSubmission.status.in_(SEAT_HOLDING_STATUSES),
    )
    if taken >= event.max_attendees:
        raise PreconditionFailed("Event is full - maximum capacity reached")


def submit(form_id, user_id, responses):
    """
    Store a member's answers to a registration form.

    Raises:
        NotFound: unknown form
        PreconditionFailed: event cancelled/ended, deadline passed or full
        Conflict: the member already submitted this form
        ValidationError: missing required field or invalid value
    """
    form = get_form_by_id(form_id)

    try:
        event = lock_event(form.event_id)
        ensure_open_for_registration(event)

        existing = RegistrationSubmission.query.filter_by(
            form_id=form.id, user_id=user_id
        ).first()
        if existing:
            raise Conflict("You have already submitted a registration for this event")

        cleaned = validate_responses(form.fields, responses)

        _ensure_seat_left(event)

        submission = RegistrationSubmission()
        submission.form_id = form.id
        submission.event_id = form.event_id
        submission.user_id = user_id
        submission.responses = cleaned
        if form.requires_approval:
            submission.status = SubmissionStatus.PENDING
            submission.approved_at = None
        else:
            submission.status = SubmissionStatus.APPROVED
            submission.approved_at = utcnow()
        db.session.add(submission)
        db.session.flush()

        log_activity(user_id, "SUBMIT_REGISTRATION", "RegistrationSubmission", submission.id,
                     f"Submitted registration for: {event.title}")
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("You have already submitted a registration for this event")
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Submission %s for form %s by user %s is %s",
        submission.id, form.id, user_id, submission.status.value,
    )
    return submission


def update_status(submission_id, status, actor_id, rejection_reason=None):
    """Admin decision on a submission."""
    try:
        new_status = SubmissionStatus(status)
    except ValueError:
        raise ValidationError("Invalid status")
    if new_status not in DECISION_STATUSES:
        raise ValidationError("Invalid status")

    submission = get_submission(submission_id)

    try:
        _apply_decision(submission, new_status, actor_id, rejection_reason)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return submission


def _apply_decision(submission, new_status, actor_id, rejection_reason):
    if new_status == SubmissionStatus.APPROVED:
        # Rejected and waitlisted submissions gave their seat back
        if submission.status not in SEAT_HOLDING_STATUSES:
            _ensure_seat_left(lock_event(submission.event_id))
        submission.approved_by_id = actor_id
        submission.approved_at = utcnow()
        submission.rejection_reason = None
    elif new_status == SubmissionStatus.REJECTED:
        reason = (rejection_reason or "").strip()
        if not reason:
            raise ValidationError("A rejection reason is required")
        submission.rejection_reason = reason
        submission.approved_by_id = None
        submission.approved_at = None
    else:
        submission.rejection_reason = None
        submission.approved_by_id = None
        submission.approved_at = None

    # Attendance belongs to approved submissions only
    if new_status != SubmissionStatus.APPROVED:
        submission.attended = None
        submission.attendance_marked_at = None
        submission.attendance_marked_by_id = None

    submission.status = new_status
    log_activity(actor_id, f"{new_status.value}_REGISTRATION", "RegistrationSubmission",
                 submission.id, f"{new_status.value} registration for: {submission.event.title}")


def bulk_approve(submission_ids, actor_id):
    """
    Approve the given submissions that are still PENDING.

    One conditional UPDATE: rows in any other state are left alone.
    Returns the number of submissions actually approved.
    """
    ids = sorted({int(i) for i in submission_ids})
    if not ids:
        raise ValidationError("Submission IDs array is required")

    result = db.session.execute(
        db.update(RegistrationSubmission)
        .where(
            RegistrationSubmission.id.in_(ids),
            RegistrationSubmission.status == SubmissionStatus.PENDING,
        )
        .values(
            status=SubmissionStatus.APPROVED,
            approved_by_id=actor_id,
            approved_at=utcnow(),
            rejection_reason=None,
        )
        .execution_options(synchronize_session="evaluate")
    )
    count = result.rowcount or 0

    log_activity(actor_id, "BULK_APPROVE_REGISTRATIONS", "RegistrationSubmission", ids[0],
                 f"Bulk approved {count} of {len(ids)} registrations")
    db.session.commit()
    return count


def mark_attendance(submission_id, attended, actor_id):
    submission = get_submission(submission_id)

    if submission.status != SubmissionStatus.APPROVED:
        raise PreconditionFailed("Only approved registrations can have attendance marked")

    submission.attended = bool(attended)
    submission.attendance_marked_at = utcnow()
    submission.attendance_marked_by_id = actor_id

    who = submission.user.name if submission.user else submission.user_id
    log_activity(actor_id, "MARK_ATTENDANCE", "RegistrationSubmission", submission.id,
                 f"Marked {'present' if attended else 'absent'} for {who} at {submission.event.title}")
    db.session.commit()
    return submission


def get_attendance_stats(event_id):
    """Submission counts for an event and the attendance rate of approved ones."""
    base = db.session.query(func.count(RegistrationSubmission.id)).filter(
        RegistrationSubmission.event_id == event_id
    )
    approved_q = base.filter(RegistrationSubmission.status == SubmissionStatus.APPROVED)

    total = base.scalar() or 0
    approved = approved_q.scalar() or 0
    attended = approved_q.filter(RegistrationSubmission.attended.is_(True)).scalar() or 0
    absent = approved_q.filter(RegistrationSubmission.attended.is_(False)).scalar() or 0

    rate = round(attended / approved * 100, 2) if approved else 0

    return {
        "total_submissions": total,
        "approved": approved,
        "attended": attended,
        "absent": absent,
        "attendance_rate": rate,
    }


def list_submissions(event_id, status=None, search=None, page=1, per_page=None):
    query = RegistrationSubmission.query.filter(RegistrationSubmission.event_id == event_id)

    if status:
        try:
            query = query.filter(RegistrationSubmission.status == SubmissionStatus(status.upper()))
        except ValueError:
            raise ValidationError(f"Invalid status: {status}")

    search = (search or "").strip()
    if search:
        query = query.join(User, RegistrationSubmission.user_id == User.id).filter(
            or_(
                User.name.ilike(f"%{search}%"),
                User.student_id.ilike(f"%{search}%"),
                User.email.ilike(f"%{search}%"),
            )
        )

    per_page = per_page or current_app.config.get("SUBMISSIONS_PER_PAGE", 50)
    query = query.order_by(RegistrationSubmission.created_at.desc(), RegistrationSubmission.id.desc())
    return query.paginate(page=max(page or 1, 1), per_page=min(max(per_page, 1), 200),
                          error_out=False)


def get_user_submission(event_id, user_id):
    """The member's own submission for an event, or None if not submitted yet."""
    form = RegistrationForm.query.filter_by(event_id=event_id).first()
    if not form:
        raise NotFound("No registration form found for this event")
    return RegistrationSubmission.query.filter_by(form_id=form.id, user_id=user_id).first()
