from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from bitsa import db
from bitsa.schemas import (
    event_schema,
    events_schema,
    event_list_args_schema,
    registrations_schema,
    registration_schema,
    registration_status_schema,
)
from bitsa.services import event_service, registration_service, stats_service
from bitsa.utils.auth_helpers import require_admin
from bitsa.utils.errors import ServiceError

events_bp = Blueprint("events", __name__, url_prefix="/api/events")


def _invalid(e):
    return jsonify({"success": False, "message": "Invalid data", "errors": e.messages}), 400


# List events


@events_bp.route("/", methods=["GET"])
def get_events():
    try:
        filters = event_list_args_schema.load(request.args)
        page = event_service.list_events(filters)

        return jsonify(
            {
                "success": True,
                "events": events_schema.dump(page.items),
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
        current_app.logger.exception("Error listing events")
        return jsonify({"success": False, "message": "Error fetching events"}), 500


# Create event


@events_bp.route("/", methods=["POST"])
@jwt_required()
@require_admin
def create_event():
    try:
        data = event_schema.load(request.get_json() or {})
        event = event_service.create_event(data, int(get_jwt_identity()))

        return jsonify(
            {
                "success": True,
                "message": "Event created successfully",
                "event": event_schema.dump(event),
            }
        ), 201

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error creating event")
        return jsonify({"success": False, "message": "Error creating event"}), 500


# Admin overview


@events_bp.route("/stats", methods=["GET"])
@jwt_required()
@require_admin
def get_stats():
    try:
        return jsonify({"success": True, **stats_service.get_event_stats()}), 200
    except Exception:
        current_app.logger.exception("Error computing event stats")
        return jsonify({"success": False, "message": "Error fetching statistics"}), 500


@events_bp.route("/<int:event_id>", methods=["GET"])
def get_event(event_id):
    try:
        event = event_service.get_event(event_id)
        return jsonify({"success": True, "event": event_schema.dump(event)}), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching event %s", event_id)
        return jsonify({"success": False, "message": "Error fetching event"}), 500


@events_bp.route("/slug/<string:slug>", methods=["GET"])
def get_event_by_slug(slug):
    try:
        event = event_service.get_event_by_slug(slug)
        return jsonify({"success": True, "event": event_schema.dump(event)}), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching event by slug %s", slug)
        return jsonify({"success": False, "message": "Error fetching event"}), 500


# Update event


@events_bp.route("/<int:event_id>", methods=["PUT"])
@jwt_required()
@require_admin
def update_event(event_id):
    try:
        patch = event_schema.load(request.get_json() or {}, partial=True)
        event = event_service.update_event(event_id, patch, int(get_jwt_identity()))

        return jsonify(
            {
                "success": True,
                "message": "Event updated successfully",
                "event": event_schema.dump(event),
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error updating event %s", event_id)
        return jsonify({"success": False, "message": "Error updating event"}), 500


# Cancel event (soft delete)


@events_bp.route("/<int:event_id>", methods=["DELETE"])
@jwt_required()
@require_admin
def delete_event(event_id):
    try:
        event = event_service.cancel_event(event_id, int(get_jwt_identity()))

        return jsonify(
            {
                "success": True,
                "message": "Event cancelled successfully",
                "event": event_schema.dump(event),
            }
        ), 200

    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error cancelling event %s", event_id)
        return jsonify({"success": False, "message": "Error cancelling event"}), 500


# Registrations of an event


@events_bp.route("/<int:event_id>/registrations", methods=["GET"])
@jwt_required()
@require_admin
def get_event_registrations(event_id):
    try:
        registrations = registration_service.list_event_registrations(event_id)
        return jsonify(
            {
                "success": True,
                "registrations": registrations_schema.dump(registrations),
                "count": len(registrations),
            }
        ), 200
    except ServiceError as e:
        return e.to_response()
    except Exception:
        current_app.logger.exception("Error fetching registrations of event %s", event_id)
        return jsonify({"success": False, "message": "Error fetching registrations"}), 500


@events_bp.route("/registrations/<int:registration_id>/status", methods=["PATCH"])
@jwt_required()
@require_admin
def update_registration_status(registration_id):
    try:
        data = registration_status_schema.load(request.get_json() or {})
        registration = registration_service.update_registration_status(
            registration_id, data["status"], int(get_jwt_identity())
        )

        return jsonify(
            {
                "success": True,
                "message": "Registration status updated successfully",
                "registration": registration_schema.dump(registration),
            }
        ), 200

    except ValidationError as e:
        return _invalid(e)
    except ServiceError as e:
        return e.to_response()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error updating registration %s", registration_id)
        return jsonify({"success": False, "message": "Error updating registration"}), 500
