# fitplan/models/workout.py
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .. import db


def _finite_or_none(v: Any) -> Optional[float]:
    if v is None or v == "" or isinstance(v, bool):
        return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


@dataclass
class AdvancedMetrics:
    """
    Typed view over the free-form `advanced` JSON column.

    The known keys are normalised to numbers; any other key is kept as-is
    in `extra`.
    """

    rpe: Optional[float] = None
    avg_hr: Optional[float] = None
    elevation_m: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KEYS = ("rpe", "avg_hr", "elevation_m")

    @classmethod
    def from_json(cls, raw: Optional[Dict[str, Any]]) -> "AdvancedMetrics":
        """Raises ValueError when `raw` is not an object."""
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError("advanced must be an object")
        values = {key: _finite_or_none(raw.get(key)) for key in cls.KEYS}
        extra = {k: v for k, v in raw.items() if k not in cls.KEYS}
        return cls(extra=extra, **values)

    def to_json(self) -> Dict[str, Any]:
        out = dict(self.extra)
        # Known keys are only stored when they carry a value
        for key in self.KEYS:
            v = getattr(self, key)
            if v is not None:
                out[key] = int(v) if float(v).is_integer() else v
        return out


class Workout(db.Model):
    __tablename__ = "workouts"
    __table_args__ = (
        db.Index("ix_workouts_user_date_position", "user_id", "workout_date", "position"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    workout_date = db.Column(db.Date, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    activity_id = db.Column(
        db.Integer, db.ForeignKey("activities.id", ondelete="SET NULL"), nullable=True
    )
    title = db.Column(db.String(200))
    duration_min = db.Column(db.Integer)
    distance_m = db.Column(db.Integer)  # always meters, whatever the display unit
    notes = db.Column(db.Text)
    advanced = db.Column(db.JSON, nullable=False, default=dict)

    done = db.Column(db.Boolean, nullable=False, default=False)
    done_at = db.Column(db.DateTime)
    actual_duration_min = db.Column(db.Integer)
    actual_distance_m = db.Column(db.Integer)
    actual_notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    activity = db.relationship("Activity", lazy="joined")

    @property
    def advanced_metrics(self) -> AdvancedMetrics:
        return AdvancedMetrics.from_json(self.advanced)

    def to_dict(self):
        return {
            "id": self.id,
            "workout_date": self.workout_date.isoformat() if self.workout_date else None,
            "position": self.position,
            "activity_id": self.activity_id,
            "activity": self.activity.to_dict() if self.activity else None,
            "title": self.title,
            "duration_min": self.duration_min,
            "distance_m": self.distance_m,
            "notes": self.notes,
            "advanced": dict(self.advanced or {}),
            "done": bool(self.done),
            "done_at": self.done_at.isoformat() if self.done_at else None,
            "actual_duration_min": self.actual_duration_min,
            "actual_distance_m": self.actual_distance_m,
            "actual_notes": self.actual_notes,
        }
