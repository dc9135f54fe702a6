# fitplan/metrics.py
"""
Unit conversion and display strings for workouts.

Distances are stored in meters; activities display them either in km or
in m. Durations are entered as "HH:MM" and stored in minutes.
"""
import math
from collections import namedtuple
from typing import Any, Dict, List, Optional

Speed = namedtuple("Speed", ["type", "value"])  # type: "kmh" | "pace" | "pace100"

DASH = "—"


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _field(obj: Any, key: str, default=None):
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _pad2(n: int) -> str:
    return str(n).zfill(2)


# ------------------------------
# Input parsing
# ------------------------------
def hhmm_to_minutes(hhmm: Optional[str]) -> Optional[int]:
    if not hhmm:
        return None
    parts = str(hhmm).strip().split(":")
    if len(parts) != 2:
        return None
    try:
        h = int(parts[0])
        m = int(parts[1])
    except ValueError:
        return None
    if h < 0 or m < 0:
        return None
    return h * 60 + m


def minutes_to_hhmm(minutes: Optional[int]) -> str:
    if minutes is None:
        return ""
    return f"{_pad2(minutes // 60)}:{_pad2(minutes % 60)}"


def parse_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, bool) or not math.isfinite(value) else float(value)
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        n = float(text)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def distance_input_to_meters(value: Any, unit: str = "km") -> Optional[int]:
    """
    Convert a distance typed in the activity's unit into meters.
    "10" km -> 10000, "500" m -> 500. Blank or invalid -> None.
    """
    n = parse_number(value)
    if n is None:
        return None
    if unit == "m":
        return _round_half_up(n)
    return _round_half_up(n * 1000)


def meters_to_input(distance_m: Optional[int], unit: str = "km") -> str:
    """Inverse of distance_input_to_meters, used to prefill edit forms."""
    if distance_m is None:
        return ""
    if unit == "m":
        return str(distance_m)
    return f"{distance_m / 1000:g}"


# ------------------------------
# Display
# ------------------------------
def meters_to_pretty(distance_m: Optional[int], unit: str = "km") -> str:
    if distance_m is None:
        return DASH
    if unit == "m":
        return f"{distance_m} m"
    return f"{distance_m / 1000:.1f} km"


def minutes_to_pretty(minutes: Optional[int]) -> str:
    if minutes is None:
        return DASH
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h{_pad2(minutes % 60)}"


def minutes_to_nice(minutes: Optional[float]) -> str:
    if minutes is None:
        return ""
    m = max(0, _round_half_up(minutes))
    h, r = divmod(m, 60)
    if h <= 0:
        return f"{r} min"
    if r == 0:
        return f"{h} h"
    return f"{h} h {_pad2(r)}"


def meters_to_nice(distance_m: Optional[float], unit: str = "km") -> str:
    if distance_m is None:
        return ""
    if unit == "m":
        return f"{_round_half_up(distance_m)} m"
    km = distance_m / 1000
    return f"{km:.{0 if km >= 10 else 1}f} km"


def km_nice(km: Optional[float]) -> str:
    n = float(km or 0)
    return f"{n:.{0 if n >= 10 else 1}f}"


def auto_title(activity: Any, duration_min: Optional[int], distance_m: Optional[int]) -> str:
    """Default workout title, e.g. "Yoga — 60 min" or "Course — 45 min — 10.0 km"."""
    if activity is None:
        return "Session"
    parts = [_field(activity, "name") or "Session"]
    if duration_min is not None:
        parts.append(f"{duration_min} min")
    if distance_m is not None:
        parts.append(meters_to_pretty(distance_m, _field(activity, "distance_unit", "km")))
    return " — ".join(parts)


def advanced_chips(advanced: Optional[Dict[str, Any]]) -> List[Dict[str, str]]:
    advanced = advanced or {}
    chips = []
    if advanced.get("rpe") is not None:
        chips.append({"k": "RPE", "v": str(advanced["rpe"])})
    if advanced.get("avg_hr") is not None:
        chips.append({"k": "HR", "v": str(advanced["avg_hr"])})
    if advanced.get("elevation_m") is not None:
        chips.append({"k": "D+", "v": f"{advanced['elevation_m']}m"})
    return chips


# ------------------------------
# Speed / pace
# ------------------------------
def infer_sport(activity: Any) -> str:
    name = (_field(activity, "name") or "").lower()
    if "vélo" in name or "velo" in name or "bike" in name:
        return "bike"
    if "natation" in name or "swim" in name:
        return "swim"
    return "run"


def compute_speed(sport: str, duration_min: Optional[float], distance_m: Optional[float]) -> Optional[Speed]:
    """km/h for bike, min/km for run, min/100m for swim."""
    if not duration_min or not distance_m:
        return None

    hours = duration_min / 60
    km = distance_m / 1000

    if sport == "bike":
        return Speed("kmh", km / hours) if hours > 0 else None
    if sport == "run":
        return Speed("pace", duration_min / km) if km > 0 else None
    if sport == "swim":
        blocks100 = distance_m / 100
        return Speed("pace100", duration_min / blocks100) if blocks100 > 0 else None
    return None


def format_speed(speed: Optional[Speed]) -> str:
    if not speed:
        return ""
    if speed.type == "kmh":
        return f"{speed.value:.{0 if speed.value >= 10 else 1}f} km/h"

    total_sec = _round_half_up(speed.value * 60)
    mm, ss = divmod(total_sec, 60)
    if speed.type == "pace":
        return f"{mm}:{_pad2(ss)} /km"
    if speed.type == "pace100":
        return f"{mm}:{_pad2(ss)} /100m"
    return ""


def build_workout_subtitle(
    sport: str = "run",
    duration_min: Optional[int] = None,
    distance_m: Optional[int] = None,
    distance_unit: str = "km",
    show_speed: bool = True,
) -> str:
    """One-liner for workout cards, e.g. 45 min • 10.0 km • 4:30 /km."""
    parts = []
    if duration_min is not None:
        parts.append(minutes_to_nice(duration_min))
    if distance_m is not None:
        parts.append(meters_to_nice(distance_m, distance_unit))
    if show_speed:
        s = format_speed(compute_speed(sport, duration_min, distance_m))
        if s:
            parts.append(s)
    return " • ".join(p for p in parts if p)


def workout_subtitle(workout: Dict[str, Any]) -> str:
    """Subtitle for a serialized workout, using realized values once done."""
    activity = workout.get("activity") or {}
    done = bool(workout.get("done"))
    return build_workout_subtitle(
        sport=infer_sport(activity),
        duration_min=workout.get("actual_duration_min") if done else workout.get("duration_min"),
        distance_m=workout.get("actual_distance_m") if done else workout.get("distance_m"),
        distance_unit=activity.get("distance_unit", "km"),
    )


def present_workout(workout: Dict[str, Any]) -> Dict[str, Any]:
    """Serialized workout plus the display bits shown on its card."""
    return {
        **workout,
        "subtitle": workout_subtitle(workout),
        "chips": advanced_chips(workout.get("advanced")),
    }
