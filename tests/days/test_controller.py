from __future__ import annotations

from types import SimpleNamespace

import pytest
from flask import Flask

from worklog.container import build_container
from worklog.days.controller import register
from worklog.main import create_app


@pytest.fixture
def client(tmp_path):
    settings = SimpleNamespace(
        DB_PATH=str(tmp_path / "worklog.db"),
        FALLBACK_PATH="",
        SECRET_PATH="",
        WORKLOG_SECRET="test-secret",
        NATIVE_STORAGE=True,
    )
    app = Flask(__name__)
    app.config["TESTING"] = True
    register(app, build_container(settings))
    return app.test_client()


def test_evaluate_without_saving(client):
    resp = client.post("/api/days/evaluate", json={"morningIn": "07:30", "lunchOut": "12:00", "lunchIn": "12:30"})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["predictedExit"] == "15:12"
    assert data["error"] is None
    assert data["debtMinutes"] is None
    assert client.get("/api/days/keys").get_json() == []


def test_evaluate_reports_policy_error(client):
    resp = client.post("/api/days/evaluate", json={"morningIn": "06:00"})

    assert resp.status_code == 200
    assert "before office open" in resp.get_json()["error"]


def test_put_then_get_day(client):
    resp = client.put("/api/days/2024-03-01", json={"morningIn": "08:00", "finalOut": "15:30"})

    assert resp.status_code == 200
    saved = resp.get_json()
    assert saved["calculated"]["workedMinutes"] == 420
    assert saved["calculated"]["debtMinutes"] == 12
    assert saved["updatedAt"]

    loaded = client.get("/api/days/2024-03-01").get_json()
    assert loaded["dayKey"] == "2024-03-01"
    assert loaded["finalOut"] == "15:30"
    assert loaded["calculated"] == saved["calculated"]


def test_put_with_client_calculation_is_stored_as_sent(client):
    body = {
        "morningIn": "08:00",
        "calculated": {"mode": "simple", "predictedExit": "15:42", "workedMinutes": None},
        "updatedAt": "2024-03-01T09:00:00+00:00",
    }

    client.put("/api/days/2024-03-01", json=body)

    loaded = client.get("/api/days/2024-03-01").get_json()
    assert loaded["calculated"]["predictedExit"] == "15:42"
    assert loaded["updatedAt"] == "2024-03-01T09:00:00+00:00"


def test_missing_day_is_404(client):
    assert client.get("/api/days/2024-03-01").status_code == 404


def test_bad_day_key_is_400(client):
    resp = client.put("/api/days/01-03-2024", json={"morningIn": "08:00"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_non_object_body_is_400(client):
    assert client.put("/api/days/2024-03-01", json=["08:00"]).status_code == 400


def test_history_and_clear(client):
    client.put("/api/days/2024-03-01", json={"morningIn": "08:00", "finalOut": "15:30"})
    client.put("/api/days/2024-03-02", json={"morningIn": "08:00", "lunchOut": "12:00", "lunchIn": "12:30"})

    rows = client.get("/api/days/history").get_json()
    assert [r["day_key"] for r in rows] == ["2024-03-02", "2024-03-01"]
    assert rows[0]["worked"] == "-"
    assert rows[0]["predicted_exit"] == "15:42"
    assert rows[1]["worked"] == "7h 0m"
    assert rows[1]["debt"] == "0h 12m"

    assert len(client.get("/api/days").get_json()) == 2
    assert client.delete("/api/days").get_json() == {"success": True}
    assert client.get("/api/days").get_json() == []


def test_autosave_setting(client):
    assert client.get("/api/settings/autosave").get_json() == {"enabled": False}

    assert client.put("/api/settings/autosave", json={"enabled": True}).get_json() == {"enabled": True}
    assert client.get("/api/settings/autosave").get_json() == {"enabled": True}

    assert client.put("/api/settings/autosave", json={"enabled": "yes"}).status_code == 400


def test_create_app_uses_testing_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    app = create_app()

    assert app.config["TESTING"] is True
    assert app.extensions["worklog"].engine.backend_name == "sqlite"
    resp = app.test_client().post("/api/days/evaluate", json={"morningIn": "08:00", "finalOut": "15:42"})
    assert resp.get_json()["creditMinutes"] == 0


@pytest.mark.parametrize(
    "body",
    [
        {"morningIn": "08:00", "extraSegments": [["16:00", "17:00", "18:00"]]},
        {"morningIn": "08:00", "extraSegments": ["16:00"]},
        {"morningIn": "08:00", "extraSegments": "16:00-17:00"},
        {"morningIn": "08:00", "calculated": "oops"},
        {"morningIn": "08:00", "calculated": {"mode": "bogus"}},
        {"morningIn": "08:00", "pauseNoExit": "false"},
    ],
)
def test_malformed_body_is_json_400(client, body):
    resp = client.put("/api/days/2024-03-01", json=body)

    assert resp.status_code == 400
    assert resp.is_json
    assert resp.get_json()["success"] is False
    assert client.get("/api/days/2024-03-01").status_code == 404


def test_malformed_evaluate_body_is_json_400(client):
    resp = client.post("/api/days/evaluate", json={"morningIn": "08:00", "usedPermit": 1})

    assert resp.status_code == 400
    assert "usedPermit" in resp.get_json()["message"]
