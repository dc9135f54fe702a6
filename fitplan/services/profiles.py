# fitplan/services/profiles.py
from typing import Any, Dict, Mapping, Optional

from flask import current_app

from ..errors import ValidationError
from ..models.profile import DAY_KEYS, OBJECTIVES, PlanningPrefs, Profile
from ..stats import Goals
from ..store import TableStore, commit

PROFILES = TableStore(Profile, pk="user_id")

# onboarding form values -> stored objective
ONBOARDING_GOALS = {
    "preparer_une_competition": "competition",
    "me_maintenir_en_forme": "forme",
}

MIN_AGE = 5
MAX_AGE = 120


def get_profile(user_id: int) -> Optional[Profile]:
    return PROFILES.get(user_id, user_id)


def has_profile(user_id: int) -> bool:
    return get_profile(user_id) is not None


def ensure_profile(user_id: int) -> Profile:
    """Profile row for `user_id`, created empty on first access."""
    profile = get_profile(user_id)
    if profile is not None:
        return profile
    profile = PROFILES.insert(
        user_id,
        {
            "first_name": "",
            "last_name": "",
            "objective": "forme",
            "sports": [],
            "planning_prefs": PlanningPrefs().to_json(),
        },
    )
    commit()
    current_app.logger.info(f"[profiles] created empty profile user_id={user_id}")
    return profile


def _clean_age(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        age = int(value)
    except (TypeError, ValueError):
        raise ValidationError("age must be a number")
    if not MIN_AGE <= age <= MAX_AGE:
        raise ValidationError(f"age must be between {MIN_AGE} and {MAX_AGE}")
    return age


def _clean_prefs(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return PlanningPrefs().to_json()
    if not isinstance(raw, dict):
        raise ValidationError("planning_prefs must be an object")
    rest_day = raw.get("rest_day")
    if rest_day not in (None, "") and rest_day not in DAY_KEYS:
        raise ValidationError(f"rest_day must be one of {', '.join(DAY_KEYS)}")
    return PlanningPrefs.from_json(raw).to_json()


def objective_from_goal(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of `data` with an onboarding `goal` turned into an `objective`."""
    values = dict(data)
    goal = values.pop("goal", None)
    if goal is not None and "objective" not in values:
        if goal not in ONBOARDING_GOALS:
            raise ValidationError(f"goal must be one of {', '.join(ONBOARDING_GOALS)}")
        values["objective"] = ONBOARDING_GOALS[goal]
    return values


def clean_profile_payload(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validated column values. With `partial` only the keys present in
    `data` are returned, otherwise missing ones get their defaults.
    """
    values: Dict[str, Any] = {}

    def wanted(key: str) -> bool:
        return not partial or key in data

    if wanted("objective"):
        objective = data.get("objective") or "forme"
        if objective not in OBJECTIVES:
            raise ValidationError("objective must be 'competition' or 'forme'")
        values["objective"] = objective

    if wanted("sports"):
        sports = data.get("sports") or []
        if not isinstance(sports, list):
            raise ValidationError("sports must be a list")
        values["sports"] = [str(s).strip() for s in sports if str(s).strip()]

    for key in ("first_name", "last_name"):
        if wanted(key):
            values[key] = (data.get(key) or "").strip()
    if wanted("age"):
        values["age"] = _clean_age(data.get("age"))
    if wanted("planning_prefs"):
        values["planning_prefs"] = _clean_prefs(data.get("planning_prefs"))
    return values


def save_profile(user_id: int, data: Mapping[str, Any], autocommit: bool = True) -> Profile:
    """
    Create the profile, or update only the fields present in `data` when
    one exists. An onboarding `goal` is accepted in place of `objective`.
    """
    data = objective_from_goal(data)
    existing = get_profile(user_id)
    values = clean_profile_payload(data, partial=existing is not None)
    profile = PROFILES.upsert(user_id, values, on_conflict=("user_id",))
    if autocommit:
        commit()
    return profile


def complete_onboarding(user_id: int, data: Mapping[str, Any]) -> Profile:
    """Onboarding form: names, age, sports and a goal choice."""
    profile = save_profile(user_id, data)
    current_app.logger.info(f"[profiles] onboarding done user_id={user_id} objective={profile.objective}")
    return profile


def goals_for(profile: Optional[Profile], config: Mapping[str, Any]) -> Goals:
    goals = Goals(
        minutes=config.get("DEFAULT_GOAL_MINUTES", 300),
        workouts=config.get("DEFAULT_GOAL_WORKOUTS", 4),
    )
    if profile is None:
        return goals
    prefs = profile.prefs
    if prefs.weekly_target_hours:
        goals.minutes = prefs.weekly_target_hours * 60
    if prefs.weekly_target_km:
        goals.km = prefs.weekly_target_km
    if prefs.available_days:
        goals.workouts = len(prefs.available_days)
    return goals


def rest_day_of(profile: Optional[Profile]) -> Optional[str]:
    return profile.prefs.rest_day if profile is not None else None
