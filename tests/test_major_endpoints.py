import importlib
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from conftest import NEXT_TUESDAY, READ, RUN, WEDNESDAY

HEADERS = {"X-User-Id": "owner-1"}
OTHER_HEADERS = {"X-User-Id": "owner-2"}


@pytest.fixture()
def app_module(monkeypatch):
    db_module = importlib.import_module("timetable_tracker.core.db")
    monkeypatch.setattr(db_module, "_schema_ready", True)
    return importlib.import_module("timetable_tracker.application")


@pytest.fixture()
def clock(monkeypatch):
    router_module = importlib.import_module("timetable_tracker.web.routers.timetable_router")
    state = {"now": WEDNESDAY}
    monkeypatch.setattr(router_module, "current_time", lambda: state["now"])
    return state


@contextmanager
def _client_with_db(app_module, engine):
    from timetable_tracker.core.db import get_db

    def _override_get_db():
        with Session(engine) as session:
            yield session

    app_module.app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app_module.app) as client:
            yield client
    finally:
        app_module.app.dependency_overrides.clear()


@pytest.fixture()
def client(app_module, engine, clock):
    with _client_with_db(app_module, engine) as test_client:
        yield test_client


def _create(client, name="Study", activities=(READ,), headers=HEADERS):
    response = client.post(
        "/api/timetables",
        json={"name": name, "default_activities": [activity.as_dict() for activity in activities]},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_missing_owner_header_is_unauthorized(client):
    response = client.get("/api/timetables")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized"


def test_responses_are_marked_no_store(client):
    response = client.get("/api/timetables", headers=HEADERS)

    assert response.status_code == 200
    assert "no-store" in response.headers["cache-control"]
    assert response.json() == {"count": 0, "data": []}


def test_create_returns_timetable_with_current_week(client):
    data = _create(client, activities=(READ, RUN))

    assert data["name"] == "Study"
    assert data["is_active"] is True
    assert data["default_activities"] == [READ.as_dict(), RUN.as_dict()]
    week = data["current_week"]
    assert week["week_start_date"] == "2026-10-12T00:00:00"
    assert week["week_end_date"] == "2026-10-18T23:59:59.999000"
    assert [item["activity"] for item in week["activities"]] == [READ.as_dict(), RUN.as_dict()]
    assert data["history"] == []


def test_create_validation_and_conflict_errors(client):
    response = client.post("/api/timetables", json={"name": ""}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"] == "Name is required"

    _create(client)
    response = client.post("/api/timetables", json={"name": "Study"}, headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"] == "A timetable with this name already exists"


def test_active_current_week_route_is_not_shadowed_by_id_route(client):
    response = client.get("/api/timetables/current-week", headers=HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert payload["timetable_name"] == "Default Timetable"
    assert len(payload["data"]["activities"]) == 5


def test_toggle_updates_rates_and_rejects_bad_day(client):
    timetable = _create(client)
    activity_id = timetable["current_week"]["activities"][0]["id"]

    response = client.post(
        f"/api/timetables/{timetable['id']}/toggle",
        json={"activity_id": activity_id, "day_index": 0},
        headers=HEADERS,
    )
    assert response.status_code == 200
    week = response.json()["data"]
    assert week["activities"][0]["daily_status"][0] is True
    assert week["activities"][0]["completion_rate"] == 14.3
    assert week["overall_completion_rate"] == pytest.approx(14.2857, abs=1e-3)

    response = client.post(
        f"/api/timetables/{timetable['id']}/toggle",
        json={"activity_id": activity_id, "day_index": 7},
        headers=HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Day index must be between 0 and 6"


def test_other_owner_gets_not_found(client):
    timetable = _create(client)

    response = client.get(f"/api/timetables/{timetable['id']}", headers=OTHER_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Timetable not found or not authorized"


def test_update_activities_preserves_matching_progress(client):
    timetable = _create(client, activities=(READ, RUN))
    read_id = timetable["current_week"]["activities"][0]["id"]
    client.post(
        f"/api/timetables/{timetable['id']}/toggle",
        json={"activity_id": read_id, "day_index": 2},
        headers=HEADERS,
    )

    response = client.put(
        f"/api/timetables/{timetable['id']}/activities",
        json={"activities": [RUN.as_dict(), READ.as_dict()]},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["default_activities"] == [RUN.as_dict(), READ.as_dict()]
    rows = {item["activity"]["name"]: item for item in data["current_week"]["activities"]}
    assert rows["Read"]["id"] == read_id
    assert rows["Read"]["daily_status"][2] is True
    assert rows["Run"]["daily_status"] == [False] * 7


def test_update_activities_requires_an_array(client):
    timetable = _create(client)

    response = client.put(
        f"/api/timetables/{timetable['id']}/activities",
        json={"activities": "Read"},
        headers=HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid input: activities must be an array"


def test_reading_after_week_end_archives_into_history(client, clock):
    timetable = _create(client)

    clock["now"] = NEXT_TUESDAY
    response = client.get(f"/api/timetables/{timetable['id']}/current-week", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["data"]["week_start_date"] == "2026-10-19T00:00:00"

    response = client.get(f"/api/timetables/{timetable['id']}/history?page=1&limit=5", headers=HEADERS)
    payload = response.json()
    assert payload["total_weeks"] == 1
    assert payload["total_pages"] == 1
    assert payload["history"][0]["week_start_date"] == "2026-10-12T00:00:00"


def test_history_rejects_bad_page(client):
    timetable = _create(client)

    response = client.get(f"/api/timetables/{timetable['id']}/history?page=0", headers=HEADERS)

    assert response.status_code == 400


def test_new_week_and_stats(client):
    timetable = _create(client)

    response = client.post(f"/api/timetables/{timetable['id']}/new-week", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["message"] == "New week started successfully"

    response = client.get(f"/api/timetables/{timetable['id']}/stats", headers=HEADERS)
    stats = response.json()["data"]
    assert stats["overall"]["total_weeks"] == 2
    assert stats["overall"]["best_week"]["week_start_date"] == "2026-10-12T00:00:00"
    assert stats["current_week"]["by_category"]["Self"]["completed"] == 0


def test_delete_rules(client):
    first = _create(client, "First")

    response = client.delete(f"/api/timetables/{first['id']}", headers=HEADERS)
    assert response.status_code == 409

    second = _create(client, "Second")
    response = client.delete(f"/api/timetables/{first['id']}", headers=HEADERS)
    assert response.status_code == 200
    assert response.json() == {"message": "Timetable deleted successfully"}

    response = client.get(f"/api/timetables/{second['id']}", headers=HEADERS)
    assert response.json()["data"]["is_active"] is True


def test_update_activation_and_categories(client):
    _create(client, "First", activities=(READ,))
    second = _create(client, "Second", activities=(RUN,))

    response = client.put(f"/api/timetables/{second['id']}", json={"is_active": True}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is True

    listing = client.get("/api/timetables", headers=HEADERS).json()
    assert {item["name"]: item["is_active"] for item in listing["data"]} == {"First": False, "Second": True}

    response = client.get("/api/timetables/categories", headers=HEADERS)
    assert response.json() == {"categories": ["Self", "Health"]}


def test_insights_endpoint_maps_errors(app_module, engine, clock, monkeypatch):
    from timetable_tracker.core.errors import InsightUnavailableError

    router_module = importlib.import_module("timetable_tracker.web.routers.insight_router")
    calls = []

    def _fake_summary(db, owner_id, timetable_id, question=None):
        calls.append((owner_id, timetable_id, question))
        if question == "unavailable":
            raise InsightUnavailableError("OPENAI_API_KEY is not set")
        if question == "boom":
            raise RuntimeError("provider timeout")
        return "You read on Monday."

    monkeypatch.setattr(router_module, "summarize_timetable", _fake_summary)

    with _client_with_db(app_module, engine) as client:
        timetable = _create(client)
        url = f"/api/timetables/{timetable['id']}/insights"

        response = client.post(url, json={"question": "How did I do?"}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == {"timetable_id": timetable["id"], "summary": "You read on Monday."}

        response = client.post(url, json={"question": "unavailable"}, headers=HEADERS)
        assert response.status_code == 503

        response = client.post(url, json={"question": "boom"}, headers=HEADERS)
        assert response.status_code == 502

        response = client.post(url, json={}, headers={})
        assert response.status_code == 401

    assert calls[0] == ("owner-1", timetable["id"], "How did I do?")


def test_models_endpoint_reports_current_selection(app_module, engine, monkeypatch):
    selector = importlib.import_module("model_selection")
    monkeypatch.setattr(selector, "apply_model_selection", lambda *args, **kwargs: ("openai", "gpt-test", None, "key"))
    monkeypatch.setattr(selector, "current_available_models", lambda: [{"provider": "openai", "model": "gpt-test"}])

    with _client_with_db(app_module, engine) as client:
        response = client.get("/api/models")
        assert response.status_code == 200
        assert response.json()["current"] == {"provider": "openai", "model": "gpt-test", "base_url": None}

        response = client.post("/model_settings", json={"selection": ["openai"]})
        assert response.status_code == 400
        assert response.json()["detail"] == "selection must be an object"
