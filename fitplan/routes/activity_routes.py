# fitplan/routes/activity_routes.py
from flask import Blueprint, jsonify, request

from ..guards import current_user_id, profile_required
from ..services.activities import (
    create_activity,
    delete_activity,
    list_activities,
    update_activity,
    upsert_activity,
)

activities_bp = Blueprint("activities", __name__)


@activities_bp.route("", methods=["GET"])
@profile_required
def list_all():
    activities = list_activities(current_user_id())
    return jsonify({"activities": [a.to_dict() for a in activities]}), 200


@activities_bp.route("", methods=["POST"])
@profile_required
def create():
    data = request.get_json(silent=True) or {}
    activity = create_activity(current_user_id(), data)
    return jsonify({"activity": activity.to_dict()}), 201


@activities_bp.route("/upsert", methods=["POST"])
@profile_required
def upsert():
    data = request.get_json(silent=True) or {}
    activity = upsert_activity(current_user_id(), data)
    return jsonify({"activity": activity.to_dict()}), 200


@activities_bp.route("/<int:activity_id>", methods=["PUT"])
@profile_required
def update(activity_id: int):
    data = request.get_json(silent=True) or {}
    activity = update_activity(current_user_id(), activity_id, data)
    return jsonify({"activity": activity.to_dict()}), 200


@activities_bp.route("/<int:activity_id>", methods=["DELETE"])
@profile_required
def delete(activity_id: int):
    delete_activity(current_user_id(), activity_id)
    return jsonify({"message": "activity deleted"}), 200
