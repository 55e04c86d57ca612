"""Service-level error taxonomy.

Services raise these; blueprints turn them into ``{success: false, message}``
responses with the matching HTTP status code.
"""

from flask import jsonify


class ServiceError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self):
        return jsonify({"success": False, "message": self.message}), self.status_code


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid data"


class PreconditionFailed(ServiceError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "Resource already exists"
