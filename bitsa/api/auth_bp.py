from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import create_access_token, jwt_required
from marshmallow import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from bitsa import db
from bitsa.models.enums import UserRole
from bitsa.models.user import User
from bitsa.schemas import user_schema, user_register_schema, user_login_schema
from bitsa.utils.audit import log_activity
from bitsa.utils.auth_helpers import get_current_user, require_user

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _token_for(user):
    return create_access_token(
        identity=str(user.id), additional_claims={'role': user.role.value}
    )


# Student sign-up


@auth_bp.route('/register', methods=['POST'])
def register():
    try:
        data = user_register_schema.load(request.get_json() or {})
        email = data['email'].strip().lower()

        taken = User.query.filter(
            or_(User.student_id == data['student_id'], User.email == email)
        ).first()
        if taken:
            return jsonify({'success': False,
                            'message': 'Student ID or email already registered'}), 409

        user = User()
        user.student_id = data['student_id']
        user.name = data['name']
        user.email = email
        user.phone = data.get('phone')
        user.course = data.get('course')
        user.year_of_study = data.get('year_of_study')
        user.role = UserRole.STUDENT
        user.set_password(data['password'])
        db.session.add(user)
        db.session.flush()
        log_activity(user.id, 'REGISTER', 'User', user.id, f'New member: {user.student_id}')
        db.session.commit()

        return jsonify({
            'success': True,
            'message': 'Account created successfully',
            'access_token': _token_for(user),
            'user': user_schema.dump(user),
        }), 201

    except ValidationError as e:
        return jsonify({'success': False, 'message': 'Invalid data', 'errors': e.messages}), 400
    except IntegrityError:
        db.session.rollback()
        return jsonify({'success': False,
                        'message': 'Student ID or email already registered'}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error registering user')
        return jsonify({'success': False,
                        'message': 'An error occurred during registration'}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = user_login_schema.load(request.get_json() or {})
        identifier = data['identifier'].strip()

        user = User.query.filter(
            or_(User.student_id == identifier, User.email == identifier.lower())
        ).first()

        if not user or not user.check_password(data['password']):
            return jsonify({'success': False, 'message': 'Invalid credentials'}), 401

        if not user.is_active:
            return jsonify({'success': False,
                            'message': 'Your account has been deactivated. Please contact admin.'}), 403

        return jsonify({
            'success': True,
            'access_token': _token_for(user),
            'user': user_schema.dump(user),
        }), 200

    except ValidationError as e:
        return jsonify({'success': False, 'message': 'Invalid data', 'errors': e.messages}), 400
    except Exception:
        current_app.logger.exception('Error during login')
        return jsonify({'success': False, 'message': 'An error occurred during login'}), 500


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
@require_user
def me():
    try:
        return jsonify({'success': True, 'user': user_schema.dump(get_current_user())}), 200
    except Exception:
        current_app.logger.exception('Error fetching current user')
        return jsonify({'success': False, 'message': 'An error occurred while fetching user'}), 500
