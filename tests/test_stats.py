"""Tests for planned vs. realized aggregations."""

from datetime import date

import pytest

from fitplan.dates import week_days
from fitplan.planner import group_by_date
from fitplan.stats import (
    Goals,
    compare_periods,
    compute_period_stats,
    compute_week_load,
    compute_weekly_summary,
    format_pct,
    pct_delta,
    pct_of,
    realized_duration,
    realized_distance,
)

RUN = {"id": 1, "name": "Course", "color": "#22c55e", "distance_unit": "km"}
BIKE = {"id": 2, "name": "Vélo", "color": "#f97316", "distance_unit": "km"}


def row(wid, day, activity=RUN, duration=None, distance=None, done=False,
        actual_duration=None, actual_distance=None, position=0):
    return {
        "id": wid,
        "workout_date": day,
        "position": position,
        "activity_id": activity["id"] if activity else None,
        "activity": activity,
        "duration_min": duration,
        "distance_m": distance,
        "done": done,
        "actual_duration_min": actual_duration,
        "actual_distance_m": actual_distance,
    }


class TestPercentages:
    def test_delta_from_zero_baseline(self):
        assert pct_delta(50, 0) == 100.0
        assert pct_delta(0, 0) == 0.0

    def test_delta(self):
        assert pct_delta(150, 100) == pytest.approx(50.0)
        assert pct_delta(50, 100) == pytest.approx(-50.0)

    def test_pct_of_is_clamped(self):
        assert pct_of(120, 100) == 100.0
        assert pct_of(5, 0) == 0.0

    def test_format_pct(self):
        assert format_pct(12.4) == "+12%"
        assert format_pct(0) == "+0%"
        assert format_pct(-33.6) == "-34%"


class TestRealizedValues:
    def test_actual_value_wins(self):
        w = row(1, "2024-03-04", duration=60, done=True, actual_duration=45)
        assert realized_duration(w) == 45

    def test_fallback_to_planned(self):
        w = row(1, "2024-03-04", duration=60, distance=10000, done=True)
        assert realized_duration(w) == 60
        assert realized_distance(w) == 10000

    def test_no_fallback(self):
        w = row(1, "2024-03-04", duration=60, done=True)
        assert realized_duration(w, fallback=False) == 0

    def test_explicit_zero_is_kept(self):
        w = row(1, "2024-03-04", duration=60, done=True, actual_duration=0)
        assert realized_duration(w) == 0


class TestPeriodStats:
    def test_planned_counts_every_workout_done_only_completed(self):
        workouts = [
            row(1, "2024-03-04", RUN, duration=60, distance=10000, done=True, actual_duration=50),
            row(2, "2024-03-05", BIKE, duration=90, distance=30000),
            row(3, "2024-03-06", RUN, duration=30, distance=5000, done=True),
        ]
        s = compute_period_stats(workouts)

        assert s.planned_sessions == 3
        assert s.planned_min == 180
        assert s.planned_km == pytest.approx(45)
        assert s.done_sessions == 2
        assert s.done_min == 80
        assert s.done_km == pytest.approx(15)
        assert s.avg_done_min == 40
        assert s.busiest_day == "2024-03-04"
        assert s.main_sport_planned == "Course"
        assert s.main_sport_done == "Course"
        assert s.pct_done_sessions == pytest.approx(200 / 3)

    def test_empty_period(self):
        s = compute_period_stats([])
        assert s.planned_sessions == 0
        assert s.pct_done_min == 0.0
        assert s.main_sport_planned == "—"
        assert s.busiest_day is None

    def test_compare_periods(self):
        cur = compute_period_stats([row(1, "2024-03-04", duration=120)])
        prev = compute_period_stats([row(2, "2024-02-26", duration=60)])
        delta = compare_periods(cur, prev)
        assert delta["planned_min_pct"] == pytest.approx(100.0)
        assert delta["done_min_pct"] == 0.0

    def test_to_dict_has_percentages(self):
        out = compute_period_stats([row(1, "2024-03-04", duration=60, done=True)]).to_dict()
        assert out["pct_done_min"] == 100.0
        assert out["dist_time_planned"][0]["name"] == "Course"


class TestWeekLoad:
    def test_load_against_previous_week(self):
        this_week = [
            row(1, "2024-03-04", RUN, duration=60, done=True),
            row(2, "2024-03-05", BIKE, duration=90),
        ]
        prev_week = [row(3, "2024-02-26", RUN, duration=100)]

        load = compute_week_load(this_week, prev_week)

        assert load["planned_count"] == 2
        assert load["done_count"] == 1
        assert load["planned_minutes"] == 150
        assert load["done_minutes"] == 60
        assert load["total_this"] == 150
        assert load["total_prev"] == 100
        assert load["delta_global"] == pytest.approx(50.0)
        assert load["delta_label"] == "+50%"
        assert [a["name"] for a in load["activities"]] == ["Vélo", "Course"]
        run = next(a for a in load["activities"] if a["name"] == "Course")
        assert run["prev"] == 100


class TestWeeklySummary:
    def test_summary_and_goals(self):
        days = week_days(date(2024, 3, 4))
        board = group_by_date(
            [
                row(1, "2024-03-04", RUN, duration=60, distance=10000, done=True),
                row(2, "2024-03-06", BIKE, duration=120, distance=40000),
                row(3, "2024-03-11", RUN, duration=500),  # next week, ignored
            ]
        )

        summary = compute_weekly_summary(board, days, Goals(minutes=240, workouts=4, km=20))

        assert summary["planned"] == {"workouts": 2, "minutes": 180, "distance_m": 50000}
        assert summary["done"] == {"workouts": 1, "minutes": 60, "distance_m": 10000}
        assert summary["pct_done"]["workouts"] == 50.0
        assert summary["pct_goal"]["minutes"] == 25.0
        assert summary["pct_goal"]["workouts"] == 25.0
        assert summary["pct_goal"]["km"] == 50.0
        assert len(summary["by_day"]) == 7
        assert summary["by_day"][0] == {"date": "2024-03-04", "planned": 60, "done": 60}
        assert summary["donut"]["planned"]["center_label"] == "3h"

    def test_empty_week(self):
        summary = compute_weekly_summary({}, week_days(date(2024, 3, 4)))
        assert summary["planned"]["workouts"] == 0
        assert summary["pct_goal"]["km"] is None
        assert summary["donut"]["done"]["segments"] == []
