# fitplan/routes/auth_routes.py

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt, jwt_required

from .. import db
from ..errors import ServiceError
from ..guards import current_user_id
from ..models.user import TokenBlocklist, User
from ..services.profiles import save_profile

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ("first_name", "last_name", "age", "objective", "goal", "sports", "planning_prefs")


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/register", methods=["POST"])
def register():
    """
    Accepts { "email", "password" } plus optional profile fields
    (first_name, last_name, age, objective or an onboarding goal, sports,
    planning_prefs): when any is given the profile is created in the same call.
    """
    data = request.get_json(silent=True) or {}

    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""  # do NOT strip passwords

    if not email or not password:
        return jsonify({"message": "email and password are required"}), 400

    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({"message": f"password must be at least {MIN_PASSWORD_LENGTH} characters"}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"message": "email already in use"}), 400

    user = User(email=email)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.flush()

        profile_data = {k: data[k] for k in PROFILE_FIELDS if k in data}
        if profile_data:
            save_profile(user.id, profile_data, autocommit=False)

        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"Registration Error: {e}")
        return jsonify({"message": "Internal server error"}), 500

    db.session.refresh(user)
    current_app.logger.info(f"[auth/register] user_id={user.id} profile={bool(profile_data)}")
    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}

    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""  # do NOT strip passwords

    if not email or not password:
        return jsonify({"message": "email and password are required"}), 400

    user = User.query.filter_by(email=email).first()

    if not user:
        current_app.logger.info(f"[auth/login] user NOT found for '{email}'")
        return jsonify({"message": "invalid credentials"}), 401

    if not user.check_password(password):
        current_app.logger.info(f"[auth/login] bad password for user_id={user.id}")
        return jsonify({"message": "invalid credentials"}), 401

    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 200


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    jti = get_jwt()["jti"]
    db.session.add(TokenBlocklist(jti=jti))
    db.session.commit()
    current_app.logger.info(f"[auth/logout] user_id={current_user_id()}")
    return jsonify({"message": "signed out", "redirect": "/login"}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = db.session.get(User, current_user_id())
    if not user:
        return jsonify({"message": "user not found"}), 404
    return jsonify({"user": user.to_dict()}), 200
