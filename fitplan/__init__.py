# fitplan/__init__.py

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

from config import Config

db = SQLAlchemy()
jwt = JWTManager()


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)

    # CORS: the web client calls /api/*
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # -----------------------------
    # JWT error handlers
    # -----------------------------
    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return (
            jsonify(
                {
                    "message": "Missing or invalid auth token",
                    "error": reason,
                    "redirect": "/login",
                }
            ),
            401,
        )

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return (
            jsonify(
                {
                    "message": "Invalid auth token",
                    "error": reason,
                    "redirect": "/login",
                }
            ),
            401,
        )

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired", "redirect": "/login"}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"message": "Token has been revoked", "redirect": "/login"}), 401

    @jwt.token_in_blocklist_loader
    def token_in_blocklist(jwt_header, jwt_payload):
        from .models.user import TokenBlocklist

        return TokenBlocklist.is_revoked(jwt_payload["jti"])

    # -----------------------------
    # Service / store error handlers
    # -----------------------------
    from .errors import ServiceError, StoreError

    @app.errorhandler(ServiceError)
    def service_error(err):
        return jsonify(err.to_dict()), err.status

    @app.errorhandler(StoreError)
    def store_error(err):
        db.session.rollback()
        app.logger.error(f"[store] {err}")
        return jsonify({"message": "Storage error", "error": str(err)}), 500

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.auth_routes import auth_bp
    from .routes.profile_routes import profile_bp
    from .routes.activity_routes import activities_bp
    from .routes.workout_routes import workouts_bp
    from .routes.dashboard_routes import dashboard_bp
    from .routes.calendar_routes import calendar_bp
    from .routes.stats_routes import stats_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(profile_bp, url_prefix="/api/profile")
    app.register_blueprint(activities_bp, url_prefix="/api/activities")
    app.register_blueprint(workouts_bp, url_prefix="/api/workouts")
    app.register_blueprint(dashboard_bp, url_prefix="/api/dashboard")
    app.register_blueprint(calendar_bp, url_prefix="/api/calendar")
    app.register_blueprint(stats_bp, url_prefix="/api/stats")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    # -----------------------------
    # DB init
    # -----------------------------
    with app.app_context():
        from .models import activity, profile, user, workout  # noqa: F401

        db.create_all()

    return app
