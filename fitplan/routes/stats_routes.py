# fitplan/routes/stats_routes.py
from flask import Blueprint, current_app, jsonify, request

from ..dates import VIEWS, parse_iso_date, period_label, period_range, previous_range, shift_cursor, to_iso
from ..errors import ValidationError
from ..guards import current_user_id, profile_required
from ..services.workouts import fetch_rows
from ..stats import compare_periods, compute_period_stats

stats_bp = Blueprint("stats", __name__)


@stats_bp.route("", methods=["GET"])
@profile_required
def period_stats():
    """
    GET /api/stats?view=week|month|year&date=YYYY-MM-DD

    Planned vs. done for the period holding `date`, compared with the
    period just before it.
    """
    view = request.args.get("view") or "week"
    if view not in VIEWS:
        raise ValidationError(f"view must be one of {', '.join(VIEWS)}")
    try:
        cursor = parse_iso_date(request.args.get("date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")

    user_id = current_user_id()
    fallback = current_app.config.get("DONE_FALLBACK_TO_PLANNED", True)

    cur_range = period_range(view, cursor)
    prev_range = previous_range(view, cursor)

    cur = compute_period_stats(fetch_rows(user_id, cur_range.start, cur_range.last_day), fallback)
    prev = compute_period_stats(fetch_rows(user_id, prev_range.start, prev_range.last_day), fallback)

    return jsonify(
        {
            "view": view,
            "label": period_label(view, cur_range.start),
            "start": to_iso(cur_range.start),
            "end": to_iso(cur_range.last_day),
            "prev_cursor": to_iso(shift_cursor(view, cur_range.start, -1)),
            "next_cursor": to_iso(shift_cursor(view, cur_range.start, 1)),
            "cur": cur.to_dict(),
            "prev": prev.to_dict(),
            "delta": compare_periods(cur, prev),
        }
    ), 200
