# fitplan/stats.py
"""
Planned vs. realized training load.

Every function works on serialized workout rows (``Workout.to_dict()``), so
the same code aggregates a week board, a calendar month or a stats period.

"Planned" covers every workout of the range; "done" only those with
``done=True``. Realized duration/distance come from the ``actual_*``
columns; with ``fallback=True`` a missing actual value is replaced by the
planned one.
"""
import math
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .dates import to_iso

Row = Mapping[str, Any]

UNKNOWN_ACTIVITY = {"name": "Other", "color": "#999999", "distance_unit": "km"}


# ------------------------------
# Percentages
# ------------------------------
def pct_delta(current: float, previous: float) -> float:
    """Period-over-period change in percent; a zero baseline yields 100 or 0."""
    current = safe_num(current)
    previous = safe_num(previous)
    if previous <= 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def clamp_pct(x: float) -> float:
    if x is None or not math.isfinite(x):
        return 0.0
    return max(0.0, min(100.0, float(x)))


def pct_of(done: float, planned: float) -> float:
    if not planned or planned <= 0:
        return 0.0
    return clamp_pct(done / planned * 100)


def format_pct(p: float) -> str:
    sign = "+" if p >= 0 else ""
    return f"{sign}{int(math.floor(p + 0.5))}%"


def safe_num(n: Any) -> float:
    try:
        x = float(n)
    except (TypeError, ValueError):
        return 0.0
    return x if math.isfinite(x) else 0.0


# ------------------------------
# Row accessors
# ------------------------------
def planned_duration(w: Row) -> int:
    return w.get("duration_min") or 0


def planned_distance(w: Row) -> int:
    return w.get("distance_m") or 0


def realized_duration(w: Row, fallback: bool = True) -> int:
    actual = w.get("actual_duration_min")
    if actual is None and fallback:
        actual = w.get("duration_min")
    return actual or 0


def realized_distance(w: Row, fallback: bool = True) -> int:
    actual = w.get("actual_distance_m")
    if actual is None and fallback:
        actual = w.get("distance_m")
    return actual or 0


def _activity_of(w: Row) -> Dict[str, Any]:
    return w.get("activity") or {}


def activity_key(w: Row) -> str:
    act = _activity_of(w)
    if act.get("id") is not None:
        return f"id:{act['id']}"
    if w.get("activity_id") is not None:
        return f"id:{w['activity_id']}"
    return f"name:{act.get('name') or UNKNOWN_ACTIVITY['name']}"


def flatten(workouts_by_date: Mapping[str, Sequence[Row]], days: Optional[Iterable[date]] = None) -> List[Row]:
    if days is None:
        return [w for key in sorted(workouts_by_date) for w in workouts_by_date[key]]
    return [w for d in days for w in workouts_by_date.get(to_iso(d), [])]


# ------------------------------
# Stats page: one period
# ------------------------------
@dataclass
class ActivityShare:
    key: str
    name: str
    color: str
    min: float = 0
    km: float = 0


@dataclass
class PeriodStats:
    planned_sessions: int = 0
    planned_min: float = 0
    planned_km: float = 0
    avg_planned_min: float = 0
    avg_planned_km: float = 0

    done_sessions: int = 0
    done_min: float = 0
    done_km: float = 0
    avg_done_min: float = 0
    avg_done_km: float = 0

    dist_time_planned: List[ActivityShare] = field(default_factory=list)
    dist_time_done: List[ActivityShare] = field(default_factory=list)

    busiest_day: Optional[str] = None
    busiest_min: float = 0

    main_sport_planned: str = "—"
    main_sport_done: str = "—"

    @property
    def pct_done_min(self) -> float:
        return pct_of(self.done_min, self.planned_min)

    @property
    def pct_done_km(self) -> float:
        return pct_of(self.done_km, self.planned_km)

    @property
    def pct_done_sessions(self) -> float:
        return pct_of(self.done_sessions, self.planned_sessions)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["pct_done_min"] = self.pct_done_min
        out["pct_done_km"] = self.pct_done_km
        out["pct_done_sessions"] = self.pct_done_sessions
        return out


def _share_for(bucket: Dict[str, ActivityShare], w: Row) -> ActivityShare:
    key = activity_key(w)
    share = bucket.get(key)
    if share is None:
        act = _activity_of(w)
        share = ActivityShare(
            key=key,
            name=act.get("name") or UNKNOWN_ACTIVITY["name"],
            color=act.get("color") or UNKNOWN_ACTIVITY["color"],
        )
        bucket[key] = share
    return share


def compute_period_stats(workouts: Iterable[Row], fallback: bool = True) -> PeriodStats:
    s = PeriodStats()
    by_act_planned: Dict[str, ActivityShare] = {}
    by_act_done: Dict[str, ActivityShare] = {}
    by_day_done_min: Dict[str, float] = {}

    for w in workouts:
        p_min = planned_duration(w)
        p_km = planned_distance(w) / 1000

        s.planned_sessions += 1
        s.planned_min += p_min
        s.planned_km += p_km

        share = _share_for(by_act_planned, w)
        share.min += p_min
        share.km += p_km

        if not w.get("done"):
            continue

        r_min = realized_duration(w, fallback)
        r_km = realized_distance(w, fallback) / 1000

        s.done_sessions += 1
        s.done_min += r_min
        s.done_km += r_km

        share = _share_for(by_act_done, w)
        share.min += r_min
        share.km += r_km

        day_key = w.get("workout_date")
        by_day_done_min[day_key] = by_day_done_min.get(day_key, 0) + r_min

    if s.planned_sessions:
        s.avg_planned_min = s.planned_min / s.planned_sessions
        s.avg_planned_km = s.planned_km / s.planned_sessions
    if s.done_sessions:
        s.avg_done_min = s.done_min / s.done_sessions
        s.avg_done_km = s.done_km / s.done_sessions

    s.dist_time_planned = sorted(by_act_planned.values(), key=lambda a: -a.min)
    s.dist_time_done = sorted(by_act_done.values(), key=lambda a: -a.min)

    # first day reaching the max wins
    for day, minutes in by_day_done_min.items():
        if minutes > s.busiest_min:
            s.busiest_min = minutes
            s.busiest_day = day

    if s.dist_time_planned:
        s.main_sport_planned = s.dist_time_planned[0].name
    if s.dist_time_done:
        s.main_sport_done = s.dist_time_done[0].name
    return s


def compare_periods(cur: PeriodStats, prev: PeriodStats) -> Dict[str, float]:
    return {
        "planned_min_pct": pct_delta(cur.planned_min, prev.planned_min),
        "done_min_pct": pct_delta(cur.done_min, prev.done_min),
        "planned_km_pct": pct_delta(cur.planned_km, prev.planned_km),
        "done_km_pct": pct_delta(cur.done_km, prev.done_km),
        "planned_sessions_pct": pct_delta(cur.planned_sessions, prev.planned_sessions),
        "done_sessions_pct": pct_delta(cur.done_sessions, prev.done_sessions),
    }


# ------------------------------
# Dashboard: load vs previous week
# ------------------------------
def compute_week_load(
    workouts: Sequence[Row], prev_workouts: Sequence[Row], fallback: bool = True
) -> Dict[str, Any]:
    planned_count = len(workouts)
    done = [w for w in workouts if w.get("done")]

    by_act: Dict[str, Dict[str, Any]] = {}
    for w in workouts:
        key = activity_key(w)
        act = _activity_of(w)
        row = by_act.setdefault(
            key,
            {
                "key": key,
                "id": act.get("id", w.get("activity_id")),
                "name": act.get("name") or UNKNOWN_ACTIVITY["name"],
                "color": act.get("color") or "#8b8b8b",
                "planned": 0,
                "prev": 0,
            },
        )
        row["planned"] += planned_duration(w)

    prev_by_act: Dict[str, int] = {}
    for w in prev_workouts:
        key = activity_key(w)
        prev_by_act[key] = prev_by_act.get(key, 0) + planned_duration(w)
    for key, row in by_act.items():
        row["prev"] = prev_by_act.get(key, 0)

    activities = sorted(by_act.values(), key=lambda a: -a["planned"])
    total_this = sum(planned_duration(w) for w in workouts)
    total_prev = sum(planned_duration(w) for w in prev_workouts)
    delta = pct_delta(total_this, total_prev)

    return {
        "planned_count": planned_count,
        "done_count": len(done),
        "planned_minutes": total_this,
        "done_minutes": sum(realized_duration(w, fallback) for w in done),
        "activities": activities,
        "total_this": total_this,
        "total_prev": total_prev,
        "delta_global": delta,
        "delta_label": format_pct(delta),
    }


# ------------------------------
# Weekly summary (goals, donut, by day)
# ------------------------------
@dataclass
class Goals:
    minutes: float = 300
    workouts: int = 4
    km: Optional[float] = None


def _donut(rows: List[Dict[str, Any]], total_minutes: float) -> Dict[str, Any]:
    if total_minutes <= 0 or not rows:
        return {"segments": [], "center_label": "—"}

    offset = 0.0
    segments = []
    for r in rows:
        if r["minutes"] <= 0:
            continue
        frac = r["minutes"] / total_minutes
        segments.append(
            {
                "id": r["id"],
                "name": r["name"],
                "color": r["color"],
                "minutes": r["minutes"],
                "fraction": frac,
                "offset": offset,
                "percent": int(math.floor(frac * 100 + 0.5)),
            }
        )
        offset += frac
    hours = math.floor(total_minutes / 60 * 10 + 0.5) / 10
    return {"segments": segments, "center_label": f"{hours:g}h"}


def compute_weekly_summary(
    workouts_by_date: Mapping[str, Sequence[Row]],
    days: Sequence[date],
    goals: Optional[Goals] = None,
    fallback: bool = True,
) -> Dict[str, Any]:
    goals = goals or Goals()
    all_workouts = flatten(workouts_by_date, days)
    done = [w for w in all_workouts if w.get("done")]

    planned_minutes = sum(planned_duration(w) for w in all_workouts)
    planned_distance_m = sum(planned_distance(w) for w in all_workouts)
    done_minutes = sum(realized_duration(w, fallback) for w in done)
    done_distance_m = sum(realized_distance(w, fallback) for w in done)

    by_activity: Dict[str, Dict[str, Any]] = {}
    for w in all_workouts:
        act = _activity_of(w)
        if not act and w.get("activity_id") is None:
            continue
        key = activity_key(w)
        row = by_activity.setdefault(
            key,
            {
                "id": act.get("id", w.get("activity_id")),
                "name": act.get("name") or "Activity",
                "color": act.get("color") or "#999999",
                "unit": act.get("distance_unit") or "km",
                "planned": {"minutes": 0, "distance": 0, "workouts": 0},
                "done": {"minutes": 0, "distance": 0, "workouts": 0},
            },
        )
        row["planned"]["minutes"] += planned_duration(w)
        row["planned"]["distance"] += planned_distance(w)
        row["planned"]["workouts"] += 1
        if w.get("done"):
            row["done"]["minutes"] += realized_duration(w, fallback)
            row["done"]["distance"] += realized_distance(w, fallback)
            row["done"]["workouts"] += 1

    rows = list(by_activity.values())
    planned_shares = sorted(
        ({"id": r["id"], "name": r["name"], "color": r["color"], "minutes": r["planned"]["minutes"]} for r in rows),
        key=lambda a: -a["minutes"],
    )
    done_shares = sorted(
        ({"id": r["id"], "name": r["name"], "color": r["color"], "minutes": r["done"]["minutes"]} for r in rows),
        key=lambda a: -a["minutes"],
    )
    activity_rows = sorted(
        rows, key=lambda a: (-a["planned"]["minutes"], -a["done"]["minutes"])
    )

    by_day = []
    for d in days:
        ws = workouts_by_date.get(to_iso(d), [])
        by_day.append(
            {
                "date": to_iso(d),
                "planned": sum(planned_duration(w) for w in ws),
                "done": sum(realized_duration(w, fallback) for w in ws if w.get("done")),
            }
        )

    goal_km_pct = None
    if goals.km:
        goal_km_pct = clamp_pct(done_distance_m / 1000 / goals.km * 100)

    return {
        "planned": {
            "workouts": len(all_workouts),
            "minutes": planned_minutes,
            "distance_m": planned_distance_m,
        },
        "done": {
            "workouts": len(done),
            "minutes": done_minutes,
            "distance_m": done_distance_m,
        },
        "pct_done": {
            "minutes": pct_of(done_minutes, planned_minutes),
            "distance": pct_of(done_distance_m, planned_distance_m),
            "workouts": pct_of(len(done), len(all_workouts)),
        },
        "goals": asdict(goals),
        "pct_goal": {
            "minutes": clamp_pct(done_minutes / goals.minutes * 100) if goals.minutes else 0.0,
            "workouts": clamp_pct(len(done) / goals.workouts * 100) if goals.workouts else 0.0,
            "km": goal_km_pct,
        },
        "activities": activity_rows,
        "donut": {
            "planned": _donut(planned_shares, planned_minutes),
            "done": _donut(done_shares, done_minutes),
        },
        "by_day": by_day,
    }
