from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_marshmallow import Marshmallow
import os

# Extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
ma = Marshmallow()


def create_app(config_name=None):
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app = Flask(__name__)

    from config import config

    app.config.from_object(config[config_name])
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    # Import models so Flask-Migrate sees every table
    from bitsa.models import (  # noqa: F401
        User,
        Category,
        Event,
        EventRegistration,
        RegistrationForm,
        RegistrationField,
        RegistrationSubmission,
        AuditLog,
    )

    _register_jwt_callbacks()

    from bitsa.api.auth_bp import auth_bp
    from bitsa.api.categories_bp import categories_bp
    from bitsa.api.events_bp import events_bp
    from bitsa.api.student_events_bp import student_events_bp
    from bitsa.api.event_forms_bp import event_forms_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(student_events_bp)
    app.register_blueprint(event_forms_bp)

    from bitsa.commands import register_commands

    register_commands(app)

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"success": False, "message": "Route not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({"success": False, "message": "Method not allowed"}), 405

    return app


def _register_jwt_callbacks():
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"success": False, "message": "No token provided. Please login."}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"success": False, "message": "Invalid token. Please login again."}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Session expired. Please login again."}), 401
