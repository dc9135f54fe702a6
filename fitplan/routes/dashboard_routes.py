# fitplan/routes/dashboard_routes.py
from datetime import date, timedelta

from flask import Blueprint, current_app, jsonify, request

from ..dates import day_key_to_dow, parse_iso_date, start_of_week_monday, to_iso, week_days
from ..errors import ValidationError
from ..guards import current_user_id, profile_required
from ..metrics import present_workout
from ..planner import group_by_date
from ..services.activities import ensure_default_activities, list_activities
from ..services.profiles import get_profile, goals_for, rest_day_of
from ..services.workouts import fetch_rows
from ..stats import compute_week_load, compute_weekly_summary

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/week", methods=["GET"])
@profile_required
def week():
    """
    GET /api/dashboard/week?date=YYYY-MM-DD

    Monday..Sunday board of the week holding `date` (today by default),
    today/tomorrow lists, load compared to the previous week and the
    weekly summary against the profile goals.
    """
    user_id = current_user_id()
    try:
        cursor = parse_iso_date(request.args.get("date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")

    if ensure_default_activities(user_id):
        current_app.logger.info(f"[dashboard] first visit user_id={user_id}")

    fallback = current_app.config.get("DONE_FALLBACK_TO_PLANNED", True)
    monday = start_of_week_monday(cursor)
    days = week_days(monday)
    sunday = days[-1]

    rows = [present_workout(r) for r in fetch_rows(user_id, monday, sunday)]
    prev_rows = fetch_rows(user_id, monday - timedelta(days=7), monday - timedelta(days=1))

    board = group_by_date(rows)
    for d in days:
        board.setdefault(to_iso(d), [])
    board = dict(sorted(board.items()))

    today = date.today()
    tomorrow = today + timedelta(days=1)
    near = group_by_date(present_workout(r) for r in fetch_rows(user_id, today, tomorrow))

    profile = get_profile(user_id)
    rest_day = rest_day_of(profile)

    return jsonify(
        {
            "week_start": to_iso(monday),
            "week_end": to_iso(sunday),
            "prev_week": to_iso(monday - timedelta(days=7)),
            "next_week": to_iso(monday + timedelta(days=7)),
            "days": [
                {
                    "date": to_iso(d),
                    "dow": day_key_to_dow(d),
                    "is_today": d == today,
                    "is_rest_day": day_key_to_dow(d) == rest_day,
                }
                for d in days
            ],
            "workouts_by_date": board,
            "today": near.get(to_iso(today), []),
            "tomorrow": near.get(to_iso(tomorrow), []),
            "rest_day": rest_day,
            "activities": [a.to_dict() for a in list_activities(user_id)],
            "load": compute_week_load(rows, prev_rows, fallback),
            "summary": compute_weekly_summary(
                board, days, goals_for(profile, current_app.config), fallback
            ),
        }
    ), 200
