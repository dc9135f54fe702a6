# fitplan/services/workouts.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app

from ..dates import parse_iso_date, same_iso_week, to_iso
from ..errors import NotFound, ServiceError, StoreError, ValidationError
from ..metrics import auto_title, distance_input_to_meters, hhmm_to_minutes, present_workout
from ..models.workout import AdvancedMetrics, Workout
from ..planner import Board, MoveError, MoveResult, group_by_date, reindex
from ..store import TableStore, commit, rollback
from .activities import activity_from_payload

WORKOUTS = TableStore(Workout)
WORKOUT_ORDER = [("workout_date", "asc"), ("position", "asc")]


# ------------------------------
# Helpers
# ------------------------------
def _safe_int_or_none(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _date_or_400(value: Any, field: str) -> date:
    if not value:
        raise ValidationError(f"{field} is required")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")


def _duration_from(data: Dict[str, Any], hhmm_key: str, minutes_key: str) -> Tuple[bool, Optional[int]]:
    """(present, minutes) from either an "HH:MM" field or a raw minutes field."""
    if minutes_key in data:
        return True, _safe_int_or_none(data.get(minutes_key))
    if hhmm_key in data:
        return True, hhmm_to_minutes(data.get(hhmm_key))
    return False, None


def _distance_from(data: Dict[str, Any], input_key: str, meters_key: str, unit: str) -> Tuple[bool, Optional[int]]:
    """(present, meters) from a value typed in the activity unit, or raw meters."""
    if meters_key in data:
        return True, _safe_int_or_none(data.get(meters_key))
    if input_key in data:
        return True, distance_input_to_meters(data.get(input_key), unit)
    return False, None


def _clean_text(value: Any) -> Optional[str]:
    text = (value or "").strip() if isinstance(value, str) else value
    return text or None


def _advanced_from(data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return AdvancedMetrics.from_json(data.get("advanced")).to_json()
    except ValueError as e:
        raise ValidationError(str(e))


def _unit_of(workout: Workout) -> str:
    return workout.activity.distance_unit if workout.activity else "km"


# ------------------------------
# Reads
# ------------------------------
def fetch_range(user_id: int, start: date, end: date) -> List[Workout]:
    """Workouts with start <= workout_date <= end, by date then position."""
    return WORKOUTS.select(
        user_id,
        gte={"workout_date": start},
        lte={"workout_date": end},
        order_by=WORKOUT_ORDER,
    )


def fetch_rows(user_id: int, start: date, end: date) -> List[Dict[str, Any]]:
    return [w.to_dict() for w in fetch_range(user_id, start, end)]


def fetch_board(user_id: int, start: date, end: date) -> Dict[str, List[Dict[str, Any]]]:
    return group_by_date(fetch_rows(user_id, start, end))


def get_workout(user_id: int, workout_id: Any) -> Workout:
    workout = WORKOUTS.get(user_id, workout_id)
    if workout is None:
        raise NotFound("workout")
    return workout


# ------------------------------
# Create / edit / delete
# ------------------------------
def create_workout(user_id: int, data: Dict[str, Any]) -> Workout:
    workout_date = _date_or_400(data.get("workout_date"), "workout_date")
    advanced = _advanced_from(data)

    activity = activity_from_payload(user_id, data)
    if activity is None:
        rollback()
        raise ValidationError("activity is required")

    _, duration_min = _duration_from(data, "duration", "duration_min")
    _, distance_m = _distance_from(data, "distance", "distance_m", activity.distance_unit)

    title = _clean_text(data.get("title")) or auto_title(activity, duration_min, distance_m)
    position = len(WORKOUTS.select(user_id, eq={"workout_date": workout_date}))

    workout = WORKOUTS.insert(
        user_id,
        {
            "workout_date": workout_date,
            "position": position,
            "activity_id": activity.id,
            "title": title,
            "duration_min": duration_min,
            "distance_m": distance_m,
            "notes": _clean_text(data.get("notes")),
            "advanced": advanced,
        },
    )
    commit()
    current_app.logger.info(
        f"[workouts] created id={workout.id} user_id={user_id} date={workout_date} position={position}"
    )
    return workout


def update_workout(user_id: int, workout_id: Any, data: Dict[str, Any]) -> Workout:
    """Edit form: only the fields present in `data` change."""
    workout = get_workout(user_id, workout_id)

    values: Dict[str, Any] = {}
    if "advanced" in data:
        values["advanced"] = _advanced_from(data)

    activity = activity_from_payload(user_id, data) or workout.activity
    if activity is not None:
        values["activity_id"] = activity.id
        workout.activity = activity
    unit = activity.distance_unit if activity else "km"

    present, duration_min = _duration_from(data, "duration", "duration_min")
    if present:
        values["duration_min"] = duration_min
    present, distance_m = _distance_from(data, "distance", "distance_m", unit)
    if present:
        values["distance_m"] = distance_m
    if "notes" in data:
        values["notes"] = _clean_text(data.get("notes"))
    if "title" in data:
        values["title"] = _clean_text(data.get("title")) or auto_title(
            activity,
            values.get("duration_min", workout.duration_min),
            values.get("distance_m", workout.distance_m),
        )

    WORKOUTS.update(user_id, workout.id, values)
    commit()
    return workout


def delete_workout(user_id: int, workout_id: Any) -> None:
    workout = get_workout(user_id, workout_id)
    day = workout.workout_date
    WORKOUTS.delete(user_id, workout.id)

    # keep the remaining positions of that day dense
    remaining = WORKOUTS.select(user_id, eq={"workout_date": day}, order_by=[("position", "asc")])
    for w, row in zip(remaining, reindex([{"position": w.position} for w in remaining])):
        w.position = row["position"]
    commit()


# ------------------------------
# Done flow
# ------------------------------
def mark_done(user_id: int, workout_id: Any, data: Dict[str, Any]) -> Workout:
    """
    Record a workout as done. Actual fields left out of `data` default to
    the planned values (the form is prefilled with them); fields sent empty
    are stored as null.
    """
    workout = get_workout(user_id, workout_id)

    present, actual_duration = _duration_from(data, "actual_duration", "actual_duration_min")
    if not present:
        actual_duration = workout.duration_min

    present, actual_distance = _distance_from(
        data, "actual_distance", "actual_distance_m", _unit_of(workout)
    )
    if not present:
        actual_distance = workout.distance_m

    WORKOUTS.update(
        user_id,
        workout.id,
        {
            "done": True,
            "done_at": datetime.utcnow(),
            "actual_duration_min": actual_duration,
            "actual_distance_m": actual_distance,
            "actual_notes": _clean_text(data.get("actual_notes")),
        },
    )
    commit()
    return workout


def undo_done(user_id: int, workout_id: Any) -> Workout:
    workout = get_workout(user_id, workout_id)
    WORKOUTS.update(
        user_id,
        workout.id,
        {
            "done": False,
            "done_at": None,
            "actual_duration_min": None,
            "actual_distance_m": None,
            "actual_notes": None,
        },
    )
    commit()
    return workout


# ------------------------------
# Drag-and-drop
# ------------------------------
def _load_days(user_id: int, days: List[date]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for d in sorted(set(days)):
        rows.extend(fetch_rows(user_id, d, d))
    return rows


def persist_move(
    user_id: int,
    workout_id: int,
    from_day: Any,
    to_day: Any,
    over_id: Optional[int] = None,
    allow_cross_week: bool = True,
) -> Tuple[MoveResult, Board]:
    """
    Apply a move on the two affected days and persist every changed row.

    On failure nothing is kept: the session is rolled back and the error
    carries the authoritative rows of both days.
    """
    src = _date_or_400(from_day, "from_day")
    dst = _date_or_400(to_day, "to_day")
    if not allow_cross_week and not same_iso_week(src, dst):
        raise ValidationError("workouts can only be moved within the same week")

    board = Board()
    board.begin_load()
    board.loaded(_load_days(user_id, [src, dst]))

    try:
        result = board.apply_move(workout_id, to_iso(src), to_iso(dst), over_id)
    except MoveError as e:
        raise ServiceError(str(e), status=404)

    try:
        for update in result.updates:
            values = update.values()
            if "workout_date" in values:
                values["workout_date"] = parse_iso_date(values["workout_date"])
            if WORKOUTS.update(user_id, update.workout_id, values) is None:
                raise StoreError(f"workout {update.workout_id} no longer exists")
        commit()
    except StoreError as e:
        rollback()
        board.failed(str(e), _load_days(user_id, [src, dst]))
        current_app.logger.warning(
            f"[workouts] move failed user_id={user_id} workout_id={workout_id}: {e}"
        )
        raise ServiceError(
            "Could not save the new order",
            status=500,
            error=str(e),
            extra={
                "workouts_by_date": {
                    day: [present_workout(w) for w in rows]
                    for day, rows in board.workouts_by_date.items()
                }
            },
        )

    board.saved()
    current_app.logger.info(
        f"[workouts] moved id={workout_id} {to_iso(src)} -> {to_iso(dst)} "
        f"({len(result.updates)} rows) user_id={user_id}"
    )
    return result, board
