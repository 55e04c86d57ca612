from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from bitsa import db
from bitsa.schemas import (
    form_schema,
    form_input_schema,
    submission_schema,
    submissions_schema,
    submission_status_schema,
    bulk_approve_schema,
    attendance_schema,
)
from bitsa.services import event_service, form_service, submission_service
from bitsa.utils.auth_helpers import require_admin
from bitsa.utils.errors import ServiceError

event_forms_bp = Blueprint("event_forms", __name__, url_prefix="/api/events/admin")


def _invalid(e):
    return jsonify({"success": False, "message": "Invalid data", "errors": e.messages}), 400


def _server_error(message, log_message, *args):
    db.session.rollback()
    current_app.logger.exception(log_message, *args)
    return jsonify({"success": False, "message": message}), 500


# Form definition


@event_forms_bp.route("/form/<int:event_id>", methods=["POST"])
@jwt_required()
@require_admin
def save_form(event_id):
    try:
        data = form_input_schema.load(request.get_json() or {})
        form = form_service.create_or_update_form(
            event_id,
            data["requires_approval"],
            data["field_defs"],
            int(get_jwt_identity()),
        )

        return jsonify(
            {
                "success": True,
                "message": "Registration form saved successfully",
                "form": form_schema.dump(form),
            }
        ), 201

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error(
            "Error saving registration form", "Error saving form for event %s", event_id
        )


@event_forms_bp.route("/form/<int:event_id>", methods=["GET"])
@jwt_required()
@require_admin
def get_form(event_id):
    try:
        form = form_service.get_form(event_id)
        return jsonify({"success": True, "form": form_schema.dump(form)}), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error("Error fetching registration form",
                             "Error fetching form of event %s", event_id)


# Submissions


@event_forms_bp.route("/submissions/<int:event_id>", methods=["GET"])
@jwt_required()
@require_admin
def list_submissions(event_id):
    try:
        event_service.get_event(event_id)
        page = submission_service.list_submissions(
            event_id,
            status=request.args.get("status"),
            search=request.args.get("search"),
            page=request.args.get("page", 1, type=int),
            per_page=request.args.get("per_page", type=int),
        )

        return jsonify(
            {
                "success": True,
                "submissions": submissions_schema.dump(page.items),
                "total": page.total or 0,
                "pages": page.pages,
                "current_page": page.page,
                "per_page": page.per_page,
            }
        ), 200

    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error(
            "Error fetching submissions", "Error listing submissions of event %s", event_id
        )


@event_forms_bp.route("/submissions/<int:submission_id>/status", methods=["PATCH"])
@jwt_required()
@require_admin
def update_submission_status(submission_id):
    try:
        data = submission_status_schema.load(request.get_json() or {})
        submission = submission_service.update_status(
            submission_id,
            data["status"],
            int(get_jwt_identity()),
            rejection_reason=data.get("rejection_reason"),
        )

        return jsonify(
            {
                "success": True,
                "message": f"Registration {submission.status.value.lower()} successfully",
                "submission": submission_schema.dump(submission),
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error(
            "Error updating submission", "Error updating submission %s", submission_id
        )


@event_forms_bp.route("/submissions/bulk-approve", methods=["POST"])
@jwt_required()
@require_admin
def bulk_approve():
    try:
        data = bulk_approve_schema.load(request.get_json() or {})
        count = submission_service.bulk_approve(
            data["submission_ids"], int(get_jwt_identity())
        )

        return jsonify(
            {
                "success": True,
                "message": f"{count} registrations approved successfully",
                "count": count,
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error("Error approving submissions", "Error in bulk approve")


# Attendance


@event_forms_bp.route("/submissions/<int:submission_id>/attendance", methods=["PATCH"])
@jwt_required()
@require_admin
def mark_attendance(submission_id):
    try:
        data = attendance_schema.load(request.get_json() or {})
        submission = submission_service.mark_attendance(
            submission_id, data["attended"], int(get_jwt_identity())
        )

        return jsonify(
            {
                "success": True,
                "message": "Attendance marked as "
                + ("present" if submission.attended else "absent"),
                "submission": submission_schema.dump(submission),
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error(
            "Error marking attendance", "Error marking attendance of submission %s",
            submission_id,
        )


@event_forms_bp.route("/attendance/<int:event_id>", methods=["GET"])
@jwt_required()
@require_admin
def attendance_stats(event_id):
    try:
        event_service.get_event(event_id)
        stats = submission_service.get_attendance_stats(event_id)
        return jsonify({"success": True, "stats": stats}), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        return _server_error("Error fetching attendance stats",
                             "Error computing attendance of event %s", event_id)
