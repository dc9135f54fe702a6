# fitplan/models/activity.py
from datetime import datetime
from .. import db

DISTANCE_UNITS = ("km", "m")

# Seeded for users that have no activity yet
DEFAULT_ACTIVITIES = [
    {"name": "Course", "color": "#22c55e", "distance_unit": "km"},
    {"name": "Vélo", "color": "#f97316", "distance_unit": "km"},
    {"name": "Natation", "color": "#3b82f6", "distance_unit": "m"},
]


class Activity(db.Model):
    __tablename__ = "activities"
    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uq_activities_user_name"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), nullable=False, default="#22c55e")
    distance_unit = db.Column(
        db.Enum(*DISTANCE_UNITS, name="distance_unit_enum"),
        nullable=False,
        default="km",
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "distance_unit": self.distance_unit,
        }
