# fitplan/routes/calendar_routes.py
from datetime import date

from flask import Blueprint, jsonify, request

from ..dates import add_months, iso_week_number, month_grid, parse_month, to_iso
from ..errors import ValidationError
from ..guards import current_user_id, profile_required
from ..metrics import present_workout
from ..planner import group_by_date
from ..services.workouts import fetch_rows

calendar_bp = Blueprint("calendar", __name__)


@calendar_bp.route("/month", methods=["GET"])
@profile_required
def month():
    """
    GET /api/calendar/month?month=YYYY-MM

    Full Monday-Sunday weeks covering the month; days of the adjacent
    months are included with in_month=false.
    """
    try:
        first = parse_month(request.args.get("month"))
    except ValueError:
        raise ValidationError("month must be YYYY-MM")

    grid = month_grid(first)
    rows = fetch_rows(current_user_id(), grid.grid_start, grid.grid_end)
    by_date = group_by_date(present_workout(r) for r in rows)
    today = date.today()

    weeks = []
    for week in grid.weeks:
        weeks.append(
            {
                "iso_week": iso_week_number(week[0]),
                "days": [
                    {
                        "date": to_iso(d),
                        "day": d.day,
                        "in_month": grid.in_month(d),
                        "is_today": d == today,
                        "workouts": by_date.get(to_iso(d), []),
                    }
                    for d in week
                ],
            }
        )

    return jsonify(
        {
            "month": grid.month.strftime("%Y-%m"),
            "prev_month": add_months(grid.month, -1).strftime("%Y-%m"),
            "next_month": add_months(grid.month, 1).strftime("%Y-%m"),
            "grid_start": to_iso(grid.grid_start),
            "grid_end": to_iso(grid.grid_end),
            "weeks": weeks,
        }
    ), 200
