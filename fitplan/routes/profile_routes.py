# fitplan/routes/profile_routes.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..guards import current_user_id
from ..models.profile import DAY_KEYS, OBJECTIVES, SPORT_OPTIONS
from ..services.profiles import complete_onboarding, ensure_profile, save_profile

profile_bp = Blueprint("profile", __name__)


@profile_bp.route("", methods=["GET"])
@jwt_required()
def get_profile():
    profile = ensure_profile(current_user_id())
    return jsonify(
        {
            "profile": profile.to_dict(),
            "options": {
                "objectives": list(OBJECTIVES),
                "sports": SPORT_OPTIONS,
                "days": list(DAY_KEYS),
            },
        }
    ), 200


@profile_bp.route("", methods=["PUT"])
@jwt_required()
def update_profile():
    data = request.get_json(silent=True) or {}
    profile = save_profile(current_user_id(), data)
    return jsonify({"profile": profile.to_dict()}), 200


@profile_bp.route("/onboarding", methods=["POST"])
@jwt_required()
def onboarding():
    data = request.get_json(silent=True) or {}
    profile = complete_onboarding(current_user_id(), data)
    return jsonify({"profile": profile.to_dict(), "redirect": "/dashboard"}), 200
