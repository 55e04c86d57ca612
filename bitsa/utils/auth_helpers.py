# bitsa/utils/auth_helpers.py
from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt_identity

from bitsa import db
from bitsa.models.user import User
from bitsa.models.enums import UserRole


def get_current_user():
    """Resolve the JWT identity to an active User, or None."""
    try:
        user_id = int(get_jwt_identity())
    except (ValueError, TypeError):
        return None

    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


def _require_role(*roles):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            user = get_current_user()

            if not user:
                return jsonify(
                    {"success": False, "message": "User not found or inactive"}
                ), 401

            if roles and user.role not in roles:
                return jsonify(
                    {"success": False, "message": "Access denied. Insufficient permissions."}
                ), 403

            return func(*args, **kwargs)

        return wrapper

    return decorator


require_user = _require_role()
require_admin = _require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_student = _require_role(UserRole.STUDENT)
