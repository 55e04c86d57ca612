from flask import current_app

from bitsa import db
from bitsa.models.event import Event
from bitsa.models.registration_form import RegistrationForm, RegistrationField
from bitsa.utils.audit import log_activity
from bitsa.utils.errors import NotFound, ValidationError


def _build_field(data, order):
    field = RegistrationField()
    field.label = data["label"]
    field.field_type = data["field_type"]
    field.placeholder = data.get("placeholder") or None
    field.required = bool(data.get("required", False))
    field.options = list(data.get("options") or [])
    field.validation = data.get("validation") or None
    field.order = order
    return field


def create_or_update_form(event_id, requires_approval, fields, actor_id):
    """
    Attach a registration form to an event, replacing any previous one.

    Old fields are discarded and the new ones created in input order
    (``order`` = position, 0-indexed). Everything, including flagging the
    event as requiring registration, is committed at once: a failure leaves
    the previous form untouched.
    """
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")

    if not fields:
        raise ValidationError("At least one field is required")

    try:
        form = event.registration_form
        created = form is None
        if created:
            form = RegistrationForm()
            form.event = event

        form.requires_approval = bool(requires_approval)
        # delete-orphan cascade removes the previous rows on flush
        form.fields = [_build_field(data, index) for index, data in enumerate(fields)]
        event.requires_registration = True
        db.session.add(form)
        db.session.flush()

        log_activity(actor_id, "CREATE_REGISTRATION_FORM", "RegistrationForm", form.id,
                     f"{'Created' if created else 'Updated'} registration form for event: {event.title}")
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Registration form %s for event %s saved with %s fields",
        form.id, event_id, len(fields),
    )
    return form


def get_form(event_id):
    """Form for an event with its fields in ascending ``order``."""
    form = RegistrationForm.query.filter_by(event_id=event_id).first()
    if not form:
        raise NotFound("Registration form not found")
    return form


def get_form_by_id(form_id):
    form = db.session.get(RegistrationForm, form_id)
    if not form:
        raise NotFound("Registration form not found")
    return form
