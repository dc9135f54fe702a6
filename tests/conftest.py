"""Pytest configuration and fixtures."""

import pytest

from config import TestingConfig
from fitplan import create_app, db


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email="alice@example.com", password="secret123", **profile):
    return client.post("/api/auth/register", json={"email": email, "password": password, **profile})


@pytest.fixture
def register_user(client):
    return lambda **kwargs: register(client, **kwargs)


@pytest.fixture
def auth_headers(client):
    """Headers of a registered user that completed onboarding."""
    resp = register(client, first_name="Alice", last_name="Martin", age=31, objective="forme")
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def bare_headers(client):
    """Headers of a registered user without a profile."""
    resp = register(client, email="bob@example.com")
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def activity(client, auth_headers):
    resp = client.post(
        "/api/activities",
        json={"name": "Course", "color": "#22C55E", "distance_unit": "km"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    return resp.get_json()["activity"]


@pytest.fixture
def make_workout(client, auth_headers, activity):
    def _make(workout_date="2024-03-04", **fields):
        body = {"workout_date": workout_date, "activity_id": activity["id"], **fields}
        resp = client.post("/api/workouts", json=body, headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["workout"]

    return _make
