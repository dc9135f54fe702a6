# fitplan/services/activities.py
import re
from typing import Any, Dict, List, Optional

from flask import current_app

from ..errors import NotFound, ServiceError, ValidationError
from ..models.activity import DEFAULT_ACTIVITIES, DISTANCE_UNITS, Activity
from ..models.workout import Workout
from ..store import TableStore, commit

ACTIVITIES = TableStore(Activity)
WORKOUTS = TableStore(Workout)

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
DEFAULT_COLOR = "#22c55e"


def clean_activity_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("activity name is required")

    color = (data.get("color") or DEFAULT_COLOR).strip()
    if not _HEX_COLOR.match(color):
        raise ValidationError("color must be a hex string like #22c55e")

    unit = data.get("distance_unit") or "km"
    if unit not in DISTANCE_UNITS:
        raise ValidationError("distance_unit must be 'km' or 'm'")

    return {"name": name, "color": color.lower(), "distance_unit": unit}


def list_activities(user_id: int) -> List[Activity]:
    return ACTIVITIES.select(user_id, order_by=[("name", "asc")])


def get_activity(user_id: int, activity_id: Any) -> Activity:
    activity = ACTIVITIES.get(user_id, activity_id)
    if activity is None:
        raise NotFound("activity")
    return activity


def ensure_default_activities(user_id: int) -> bool:
    """Seed the starter activities for a user that has none. Returns True if seeded."""
    if ACTIVITIES.select(user_id, limit=1):
        return False
    ACTIVITIES.insert_many(user_id, DEFAULT_ACTIVITIES)
    commit()
    current_app.logger.info(f"[activities] seeded defaults for user_id={user_id}")
    return True


def create_activity(user_id: int, data: Dict[str, Any]) -> Activity:
    values = clean_activity_payload(data)
    if ACTIVITIES.exists(user_id, name=values["name"]):
        raise ServiceError(f"activity '{values['name']}' already exists", status=409)
    activity = ACTIVITIES.insert(user_id, values)
    commit()
    return activity


def update_activity(user_id: int, activity_id: Any, data: Dict[str, Any]) -> Activity:
    values = clean_activity_payload(data)
    activity = get_activity(user_id, activity_id)

    clash = ACTIVITIES.select(user_id, eq={"name": values["name"]}, limit=1)
    if clash and clash[0].id != activity.id:
        raise ServiceError(f"activity '{values['name']}' already exists", status=409)

    ACTIVITIES.update(user_id, activity.id, values)
    commit()
    return activity


def delete_activity(user_id: int, activity_id: Any) -> None:
    activity = get_activity(user_id, activity_id)
    # linked workouts stay, without an activity
    detached = WORKOUTS.update_where(user_id, {"activity_id": activity.id}, {"activity_id": None})
    ACTIVITIES.delete(user_id, activity.id)
    commit()
    current_app.logger.info(
        f"[activities] deleted activity_id={activity.id} user_id={user_id} detached_workouts={detached}"
    )


def upsert_activity(user_id: int, data: Dict[str, Any], autocommit: bool = True) -> Activity:
    """
    Inline creation from the workout form, keyed on (user_id, name): an
    existing activity with that name gets the new color/unit.
    """
    values = clean_activity_payload(data)
    activity = ACTIVITIES.upsert(user_id, values, on_conflict=("user_id", "name"))
    if autocommit:
        commit()
    return activity


def merge_activity(cached: List[Dict[str, Any]], activity: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Add/replace `activity` in a cached list, deduplicated by id and sorted by name."""
    merged = [a for a in cached if a.get("id") != activity.get("id")]
    merged.append(activity)
    return sorted(merged, key=lambda a: (a.get("name") or "").casefold())


def activity_from_payload(user_id: int, data: Dict[str, Any]) -> Optional[Activity]:
    """
    Activity chosen on the workout form: `new_activity` (inline upsert)
    wins over `activity_id`. Returns None when neither is given.
    """
    new_activity = data.get("new_activity")
    if new_activity:
        if not isinstance(new_activity, dict):
            raise ValidationError("new_activity must be an object")
        return upsert_activity(user_id, new_activity, autocommit=False)

    activity_id = data.get("activity_id")
    if activity_id in (None, ""):
        return None
    try:
        activity_id = int(activity_id)
    except (TypeError, ValueError):
        raise ValidationError("activity_id must be an integer")
    return get_activity(user_id, activity_id)
