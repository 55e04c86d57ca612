from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bitsa import db
from bitsa.models.event_registration import EventRegistration
from bitsa.models.enums import SubmissionStatus
from bitsa.schemas import (
    event_schema,
    events_schema,
    event_list_args_schema,
    registration_schema,
    registrations_schema,
    simple_register_schema,
    form_schema,
    submission_schema,
    submit_schema,
)
from bitsa.services import (
    event_service,
    form_service,
    registration_service,
    stats_service,
    submission_service,
)
from bitsa.utils.auth_helpers import get_current_user, require_student, require_user
from bitsa.utils.datetime_utils import safe_iso
from bitsa.utils.errors import ServiceError

student_events_bp = Blueprint(
    "student_events", __name__, url_prefix="/api/events/student"
)


def _invalid(e):
    return jsonify({"success": False, "message": "Invalid data", "errors": e.messages}), 400


def _with_registration(dumped, registration):
    dumped["is_registered"] = registration is not None
    dumped["my_registration"] = (
        {
            "id": registration.id,
            "status": registration.status.value,
            "created_at": safe_iso(registration.created_at),
        }
        if registration
        else None
    )
    return dumped


def _registrations_by_event(user_id, event_ids):
    if not event_ids:
        return {}
    rows = EventRegistration.query.filter(
        EventRegistration.user_id == user_id,
        EventRegistration.event_id.in_(event_ids),
    ).all()
    return {r.event_id: r for r in rows}


# Browse events


@student_events_bp.route("/events", methods=["GET"])
@jwt_required()
@require_user
def get_events():
    try:
        user = get_current_user()
        filters = event_list_args_schema.load(request.args)
        page = event_service.list_events(filters)

        mine = _registrations_by_event(user.id, [e.id for e in page.items])
        items = [
            _with_registration(dumped, mine.get(event.id))
            for event, dumped in zip(page.items, events_schema.dump(page.items))
        ]

        return jsonify(
            {
                "success": True,
                "events": items,
                "total": page.total or 0,
                "pages": page.pages,
                "current_page": page.page,
                "per_page": page.per_page,
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error listing events for student")
        return jsonify({"success": False, "message": "Error fetching events"}), 500


@student_events_bp.route("/events/<int:event_id>", methods=["GET"])
@jwt_required()
@require_user
def get_event(event_id):
    try:
        user = get_current_user()
        event = event_service.get_event(event_id)
        mine = _registrations_by_event(user.id, [event.id])
        return jsonify(
            {
                "success": True,
                "event": _with_registration(event_schema.dump(event), mine.get(event.id)),
            }
        ), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching event %s", event_id)
        return jsonify({"success": False, "message": "An error occurred while fetching event"}), 500


# Simple (form-less) registration


@student_events_bp.route("/simple-register", methods=["POST"])
@jwt_required()
@require_student
def simple_register():
    try:
        data = simple_register_schema.load(request.get_json() or {})
        registration = registration_service.register_simple(
            data["event_id"], get_current_user().id
        )

        return jsonify(
            {
                "success": True,
                "message": "Successfully registered for the event",
                "registration": registration_schema.dump(registration),
            }
        ), 201

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error registering for event")
        return jsonify(
            {"success": False, "message": "An error occurred during registration"}
        ), 500


@student_events_bp.route("/registrations/<int:registration_id>", methods=["DELETE"])
@jwt_required()
@require_user
def cancel_registration(registration_id):
    try:
        registration_service.cancel_registration(registration_id, get_current_user())
        return jsonify(
            {"success": True, "message": "Registration cancelled successfully"}
        ), 200

    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error cancelling registration %s", registration_id)
        return jsonify(
            {"success": False, "message": "An error occurred while cancelling registration"}
        ), 500


@student_events_bp.route("/registrations", methods=["GET"])
@jwt_required()
@require_user
def my_registrations():
    try:
        groups = registration_service.list_user_registrations(get_current_user().id)
        return jsonify(
            {
                "success": True,
                "registrations": {
                    name: registrations_schema.dump(items) for name, items in groups.items()
                },
                "counts": {name: len(items) for name, items in groups.items()},
            }
        ), 200
    except Exception:
        current_app.logger.exception("Error fetching registrations of the current user")
        return jsonify(
            {"success": False, "message": "An error occurred while fetching registrations"}
        ), 500


@student_events_bp.route("/dashboard", methods=["GET"])
@jwt_required()
@require_user
def dashboard():
    try:
        data = stats_service.get_student_dashboard(get_current_user().id)
        return jsonify({"success": True, **data}), 200
    except Exception:
        current_app.logger.exception("Error building student dashboard")
        return jsonify(
            {"success": False, "message": "An error occurred while fetching dashboard"}
        ), 500


# Registration forms


@student_events_bp.route("/form/<int:event_id>", methods=["GET"])
@jwt_required()
@require_user
def get_form(event_id):
    try:
        form = form_service.get_form(event_id)
        return jsonify({"success": True, "form": form_schema.dump(form)}), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching form of event %s", event_id)
        return jsonify({"success": False, "message": "An error occurred while fetching form"}), 500


@student_events_bp.route("/form/submit", methods=["POST"])
@jwt_required()
@require_student
def submit_form():
    try:
        data = submit_schema.load(request.get_json() or {})
        submission = submission_service.submit(
            data["form_id"], get_current_user().id, data["responses"]
        )

        if submission.status == SubmissionStatus.PENDING:
            message = "Registration submitted successfully. Awaiting approval."
        else:
            message = "Registration successful!"

        return jsonify(
            {
                "success": True,
                "message": message,
                "submission": submission_schema.dump(submission),
            }
        ), 201

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error submitting registration form")
        return jsonify(
            {"success": False, "message": "An error occurred while submitting registration"}
        ), 500


@student_events_bp.route("/form/<int:event_id>/my-submission", methods=["GET"])
@jwt_required()
@require_user
def my_submission(event_id):
    try:
        submission = submission_service.get_user_submission(
            event_id, get_current_user().id
        )
        return jsonify(
            {
                "success": True,
                "submission": submission_schema.dump(submission) if submission else None,
            }
        ), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching submission for event %s", event_id)
        return jsonify(
            {"success": False, "message": "An error occurred while fetching submission"}
        ), 500
