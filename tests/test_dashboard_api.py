"""Tests for the week dashboard, month calendar and stats endpoints."""

from datetime import date

import pytest

MON = "2024-03-04"
WED = "2024-03-06"
PREV_MON = "2024-02-26"


def mark_done(client, headers, workout, **actual):
    resp = client.post(f"/api/workouts/{workout['id']}/done", json=actual, headers=headers)
    assert resp.status_code == 200
    return resp.get_json()["workout"]


class TestWeekDashboard:
    def test_first_visit_seeds_default_activities(self, client, auth_headers):
        resp = client.get(f"/api/dashboard/week?date={WED}", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.get_json()

        assert [a["name"] for a in body["activities"]] == ["Course", "Natation", "Vélo"]
        assert body["week_start"] == MON
        assert body["week_end"] == "2024-03-10"
        assert body["prev_week"] == PREV_MON
        assert body["next_week"] == "2024-03-11"
        assert list(body["workouts_by_date"]) == [d["date"] for d in body["days"]]
        assert all(items == [] for items in body["workouts_by_date"].values())

    def test_seeding_happens_once(self, client, auth_headers):
        client.get("/api/dashboard/week", headers=auth_headers)
        client.get("/api/dashboard/week", headers=auth_headers)
        assert len(client.get("/api/activities", headers=auth_headers).get_json()["activities"]) == 3

    def test_rest_day_from_planning_prefs(self, client, auth_headers):
        body = client.get(f"/api/dashboard/week?date={WED}", headers=auth_headers).get_json()
        assert body["rest_day"] == "sun"
        assert [d["dow"] for d in body["days"] if d["is_rest_day"]] == ["sun"]

    def test_load_and_summary(self, client, auth_headers, make_workout):
        run = make_workout(MON, duration="01:00", distance="10")
        mark_done(client, auth_headers, run)
        make_workout(WED, duration="00:30")
        make_workout(PREV_MON, duration="00:40")

        body = client.get(f"/api/dashboard/week?date={WED}", headers=auth_headers).get_json()

        assert [w["id"] for w in body["workouts_by_date"][MON]] == [run["id"]]
        assert body["workouts_by_date"][MON][0]["subtitle"]

        load = body["load"]
        assert load["planned_count"] == 2
        assert load["done_count"] == 1
        assert load["total_this"] == 90
        assert load["total_prev"] == 40
        assert load["delta_label"] == "+125%"

        summary = body["summary"]
        assert summary["goals"] == {"minutes": 240.0, "workouts": 3, "km": 30.0}
        assert summary["done"]["minutes"] == 60
        assert summary["pct_goal"]["minutes"] == 25.0
        assert summary["pct_done"]["workouts"] == 50.0

    def test_today_and_tomorrow(self, client, auth_headers, make_workout):
        today = make_workout(date.today().isoformat())
        body = client.get("/api/dashboard/week", headers=auth_headers).get_json()
        assert [w["id"] for w in body["today"]] == [today["id"]]
        assert body["tomorrow"] == []

    def test_bad_date(self, client, auth_headers):
        assert client.get("/api/dashboard/week?date=03/04/2024", headers=auth_headers).status_code == 400


class TestMonthCalendar:
    def test_grid(self, client, auth_headers, make_workout):
        outside = make_workout(PREV_MON)
        inside = make_workout("2024-03-15")

        resp = client.get("/api/calendar/month?month=2024-03", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.get_json()

        assert body["month"] == "2024-03"
        assert body["prev_month"] == "2024-02"
        assert body["next_month"] == "2024-04"
        assert len(body["weeks"]) == 5
        assert [w["iso_week"] for w in body["weeks"]] == [9, 10, 11, 12, 13]

        first_day = body["weeks"][0]["days"][0]
        assert first_day["date"] == PREV_MON
        assert first_day["in_month"] is False
        assert [w["id"] for w in first_day["workouts"]] == [outside["id"]]

        days = {d["date"]: d for week in body["weeks"] for d in week["days"]}
        assert days["2024-03-15"]["in_month"] is True
        assert [w["id"] for w in days["2024-03-15"]["workouts"]] == [inside["id"]]

    def test_bad_month(self, client, auth_headers):
        assert client.get("/api/calendar/month?month=2024-13", headers=auth_headers).status_code == 400


class TestStats:
    def test_week_view(self, client, auth_headers, make_workout):
        mark_done(client, auth_headers, make_workout(MON, duration="01:00", distance="10"))
        make_workout(PREV_MON, duration="00:30")

        resp = client.get(f"/api/stats?view=week&date={WED}", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.get_json()

        assert body["label"] == "Week of 4 March to 10 March"
        assert body["start"] == MON
        assert body["end"] == "2024-03-10"
        assert body["prev_cursor"] == PREV_MON
        assert body["next_cursor"] == "2024-03-11"
        assert body["cur"]["planned_min"] == 60
        assert body["cur"]["done_km"] == pytest.approx(10.0)
        assert body["prev"]["planned_min"] == 30
        assert body["delta"]["planned_min_pct"] == pytest.approx(100.0)
        assert body["delta"]["done_min_pct"] == pytest.approx(100.0)

    def test_month_and_year_views(self, client, auth_headers):
        body = client.get("/api/stats?view=month&date=2024-03-15", headers=auth_headers).get_json()
        assert body["label"] == "March 2024"
        assert (body["start"], body["end"]) == ("2024-03-01", "2024-03-31")
        assert body["prev_cursor"] == "2024-02-01"

        body = client.get("/api/stats?view=year&date=2024-03-15", headers=auth_headers).get_json()
        assert body["label"] == "2024"
        assert body["next_cursor"] == "2025-01-01"

    def test_unknown_view(self, client, auth_headers):
        assert client.get("/api/stats?view=decade", headers=auth_headers).status_code == 400

    @pytest.mark.parametrize("fallback,expected", [(True, 60), (False, 0)])
    def test_done_fallback_setting(self, app, client, auth_headers, make_workout, fallback, expected):
        app.config["DONE_FALLBACK_TO_PLANNED"] = fallback
        mark_done(client, auth_headers, make_workout(MON, duration="01:00"), actual_duration="")

        body = client.get(f"/api/stats?view=week&date={MON}", headers=auth_headers).get_json()
        assert body["cur"]["done_sessions"] == 1
        assert body["cur"]["done_min"] == expected
