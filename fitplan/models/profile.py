# fitplan/models/profile.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .. import db

OBJECTIVES = ("competition", "forme")
DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
SPORT_OPTIONS = ["Course à pied", "Vélo", "Natation", "Renfo", "Yoga", "Stretching"]


def _num_or_none(v):
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


@dataclass
class PlanningPrefs:
    """Typed view over the `planning_prefs` JSON column."""

    available_days: List[str] = field(default_factory=lambda: ["mon", "wed", "fri"])
    weekly_target_hours: Optional[float] = 4
    weekly_target_km: Optional[float] = 30
    rest_day: Optional[str] = "sun"

    @classmethod
    def from_json(cls, raw: Optional[Dict[str, Any]]) -> "PlanningPrefs":
        raw = raw or {}
        prefs = cls()
        days = raw.get("available_days")
        if isinstance(days, list):
            prefs.available_days = [d for d in days if d in DAY_KEYS]
        if "weekly_target_hours" in raw:
            prefs.weekly_target_hours = _num_or_none(raw.get("weekly_target_hours"))
        if "weekly_target_km" in raw:
            prefs.weekly_target_km = _num_or_none(raw.get("weekly_target_km"))
        if "rest_day" in raw:
            rest_day = raw.get("rest_day")
            prefs.rest_day = rest_day if rest_day in DAY_KEYS else None
        return prefs

    def to_json(self) -> Dict[str, Any]:
        return {
            "available_days": list(self.available_days),
            "weekly_target_hours": self.weekly_target_hours,
            "weekly_target_km": self.weekly_target_km,
            "rest_day": self.rest_day,
        }


class Profile(db.Model):
    __tablename__ = "profiles"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")
    age = db.Column(db.Integer)
    objective = db.Column(
        db.Enum(*OBJECTIVES, name="objective_enum"), nullable=False, default="forme"
    )
    sports = db.Column(db.JSON, nullable=False, default=list)
    planning_prefs = db.Column(db.JSON, nullable=False, default=dict)

    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = db.relationship("User", back_populates="profile")

    @property
    def prefs(self) -> PlanningPrefs:
        return PlanningPrefs.from_json(self.planning_prefs)

    @property
    def full_name(self) -> str:
        parts = [(self.first_name or "").strip(), (self.last_name or "").strip()]
        return " ".join(p for p in parts if p) or "—"

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "age": self.age,
            "objective": self.objective,
            "sports": list(self.sports or []),
            "planning_prefs": self.prefs.to_json(),
        }
