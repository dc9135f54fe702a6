# fitplan/routes/workout_routes.py

from datetime import date, timedelta
from typing import Any, Dict, List

from flask import Blueprint, current_app, jsonify, request

from ..dates import parse_iso_date, start_of_week_monday
from ..errors import ValidationError
from ..guards import current_user_id, profile_required
from ..metrics import present_workout
from ..planner import group_by_date
from ..services.workouts import (
    create_workout,
    delete_workout,
    fetch_rows,
    get_workout,
    mark_done,
    persist_move,
    undo_done,
    update_workout,
)

workouts_bp = Blueprint("workouts", __name__)


# ------------------------------
# Helpers
# ------------------------------
def _present_board(rows: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    return group_by_date(present_workout(r) for r in rows)


def _arg_date(name: str, default: date) -> date:
    try:
        return parse_iso_date(request.args.get(name), default=default)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


# ------------------------------
# Routes
# ------------------------------
@workouts_bp.route("", methods=["GET"])
@profile_required
def list_range():
    """
    GET /api/workouts?from=YYYY-MM-DD&to=YYYY-MM-DD (both inclusive).
    Defaults to the current Monday..Sunday week.
    """
    monday = start_of_week_monday(date.today())
    start = _arg_date("from", monday)
    end = _arg_date("to", start + timedelta(days=6))
    if end < start:
        raise ValidationError("'to' must not be before 'from'")

    rows = fetch_rows(current_user_id(), start, end)
    return jsonify(
        {
            "from": start.isoformat(),
            "to": end.isoformat(),
            "workouts": [present_workout(r) for r in rows],
            "workouts_by_date": _present_board(rows),
        }
    ), 200


@workouts_bp.route("", methods=["POST"])
@profile_required
def create():
    """
    Body:
    {
      "workout_date": "2024-03-04",
      "activity_id": 3,                                   # or
      "new_activity": {"name": "Yoga", "color": "#a855f7", "distance_unit": "km"},
      "duration": "01:00",     # or duration_min
      "distance": "10,5",      # in the activity unit, or distance_m
      "title": "", "notes": "", "advanced": {"rpe": 6}
    }
    """
    data = request.get_json(silent=True) or {}
    workout = create_workout(current_user_id(), data)
    return jsonify({"workout": present_workout(workout.to_dict())}), 201


@workouts_bp.route("/<int:workout_id>", methods=["GET"])
@profile_required
def get_one(workout_id: int):
    workout = get_workout(current_user_id(), workout_id)
    return jsonify({"workout": present_workout(workout.to_dict())}), 200


@workouts_bp.route("/<int:workout_id>", methods=["PUT"])
@profile_required
def update(workout_id: int):
    data = request.get_json(silent=True) or {}
    workout = update_workout(current_user_id(), workout_id, data)
    return jsonify({"workout": present_workout(workout.to_dict())}), 200


@workouts_bp.route("/<int:workout_id>", methods=["DELETE"])
@profile_required
def delete(workout_id: int):
    delete_workout(current_user_id(), workout_id)
    return jsonify({"message": "workout deleted"}), 200


@workouts_bp.route("/<int:workout_id>/done", methods=["POST"])
@profile_required
def done(workout_id: int):
    """
    Body (all optional): actual_duration ("HH:MM") or actual_duration_min,
    actual_distance (activity unit) or actual_distance_m, actual_notes.
    """
    data = request.get_json(silent=True) or {}
    workout = mark_done(current_user_id(), workout_id, data)
    return jsonify({"workout": present_workout(workout.to_dict())}), 200


@workouts_bp.route("/<int:workout_id>/undo", methods=["POST"])
@profile_required
def undo(workout_id: int):
    workout = undo_done(current_user_id(), workout_id)
    return jsonify({"workout": present_workout(workout.to_dict())}), 200


@workouts_bp.route("/move", methods=["POST"])
@profile_required
def move():
    """
    Drag-and-drop drop.
    Body: { "workout_id": 12, "from_day": "2024-03-04", "to_day": "2024-03-06", "over_id": 15 }
    `over_id` is the card dropped on (null when dropped on an empty column).
    """
    data = request.get_json(silent=True) or {}

    try:
        workout_id = int(data.get("workout_id"))
    except (TypeError, ValueError):
        raise ValidationError("workout_id is required")

    over_id = data.get("over_id")
    if over_id not in (None, ""):
        try:
            over_id = int(over_id)
        except (TypeError, ValueError):
            raise ValidationError("over_id must be an integer")
    else:
        over_id = None

    result, board = persist_move(
        current_user_id(),
        workout_id,
        data.get("from_day"),
        data.get("to_day"),
        over_id=over_id,
        allow_cross_week=current_app.config.get("ALLOW_CROSS_WEEK_MOVES", True),
    )
    return jsonify(
        {
            "moved": present_workout(result.moved),
            "updates": [{"id": u.workout_id, **u.values()} for u in result.updates],
            "workouts_by_date": {
                day: [present_workout(w) for w in rows] for day, rows in board.workouts_by_date.items()
            },
        }
    ), 200
