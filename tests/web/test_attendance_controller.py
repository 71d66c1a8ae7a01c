import pytest

from attendance_engine.container import Container
from attendance_engine.core.constants import WEEKDAY_NAMES
from attendance_engine.geofence.model import GeofenceLocation
from attendance_engine.main import create_app
from attendance_engine.settings.model import GeofenceConfig

from fakes import build_world, utc_settings

HQ = GeofenceLocation(location_id=1, name="HQ", latitude=12.9716, longitude=77.5946, radius_m=200)


def _client(monkeypatch, **world_kwargs):
    monkeypatch.setenv("APP_ENV", "testing")
    # Requests use the wall clock, so every day is a working day here.
    world_kwargs.setdefault("settings", utc_settings(working_days=WEEKDAY_NAMES))
    w = build_world(**world_kwargs)
    container = Container(
        attendance_repo=w.attendance,
        employees_repo=w.employees,
        settings_service=w.settings,
        attendance_service=w.attendance_service,
        overtime_service=w.overtime_service,
        correction_service=w.correction_service,
        scheduler=w.scheduler,
        dispatcher=w.dispatcher,
    )
    app = create_app(container=container)
    return app.test_client(), w


def _login(client, employee_id=1):
    with client.session_transaction() as sess:
        sess["employee_id"] = employee_id


def test_requires_login(monkeypatch):
    client, _ = _client(monkeypatch)

    resp = client.post("/api/attendance/clock-in", json={})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_clock_in_then_out(monkeypatch):
    client, w = _client(monkeypatch)
    _login(client)

    resp = client.post("/api/attendance/clock-in", json={"latitude": 12.9716, "longitude": 77.5946})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["status"] == "in-progress"
    assert body["data"]["location"]["checkIn"]["latitude"] == 12.9716
    assert [e.type for e in w.activity.entries] == ["attendance_checkin"]
    assert len(w.mailer.sent) == 1

    again = client.post("/api/attendance/clock-in", json={})
    assert again.status_code == 400
    assert again.get_json()["message"] == "Already clocked in today"

    out = client.post("/api/attendance/clock-out", json={})
    assert out.status_code == 200
    assert out.get_json()["data"]["checkOut"] is not None

    today = client.get("/api/attendance/today").get_json()
    history = client.get("/api/attendance/history").get_json()
    assert today["data"]["attendanceId"] == body["data"]["attendanceId"]
    assert len(history["data"]) == 1


def test_clock_out_without_clock_in(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    resp = client.post("/api/attendance/clock-out", json={})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Please clock in first"


def test_outside_geofence_is_forbidden_with_details(monkeypatch):
    strict = GeofenceConfig(enabled=True, strict_mode=True, use_multiple_locations=True)
    client, _ = _client(
        monkeypatch,
        settings=utc_settings(working_days=WEEKDAY_NAMES, geofence=strict),
        locations=[HQ],
    )
    _login(client)

    resp = client.post("/api/attendance/clock-in", json={"latitude": 12.9760, "longitude": 77.5946})
    body = resp.get_json()

    assert resp.status_code == 403
    assert body["closestLocation"] == "HQ"
    assert 480 < body["distance"] < 500


def test_invalid_coordinates_are_rejected(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    resp = client.post("/api/attendance/clock-in", json={"latitude": 123, "longitude": 77.5})

    assert resp.status_code == 400


def test_geolocation_check(monkeypatch):
    strict = GeofenceConfig(enabled=True, strict_mode=True, use_multiple_locations=True)
    client, _ = _client(
        monkeypatch,
        settings=utc_settings(working_days=WEEKDAY_NAMES, geofence=strict),
        locations=[HQ],
    )
    _login(client)

    body = client.post("/api/attendance/geolocation-check", json={"latitude": 12.9716, "longitude": 77.5946}).get_json()

    assert body["data"]["allowed"] is True
    assert body["data"]["geofenceRequired"] is True
    assert body["data"]["location"] == {"id": 1, "name": "HQ"}


def test_overtime_list_rejects_unknown_status(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    assert client.get("/api/attendance/overtime").get_json()["data"] == []
    assert client.get("/api/attendance/overtime?status=bogus").status_code == 400


def test_overtime_respond_requires_fields(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    assert client.post("/api/attendance/overtime", json={"requestId": 1}).status_code == 400
    assert client.post("/api/attendance/overtime", json={"requestId": 1, "isWorkingOvertime": True}).status_code == 404


def test_correction_rejects_unknown_type(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    resp = client.post(
        "/api/attendance/corrections",
        json={"date": "2025-01-06", "correctionType": "bogus", "reason": "x", "requestedCheckIn": "09:00"},
    )

    assert resp.status_code == 400


@pytest.mark.parametrize("headers", [{}, {"X-Cron-Secret": "wrong"}])
def test_tick_requires_cron_secret(monkeypatch, headers):
    client, _ = _client(monkeypatch)

    assert client.post("/internal/attendance/tick", headers=headers).status_code == 401


def test_tick_returns_report(monkeypatch):
    client, _ = _client(monkeypatch)

    resp = client.post("/internal/attendance/tick", headers={"X-Cron-Secret": "test-cron-secret"})

    assert resp.status_code == 200
    assert set(resp.get_json()["data"]) == {"counts", "failures"}


def test_mark_absent_rejects_bad_dates(monkeypatch):
    client, _ = _client(monkeypatch)

    resp = client.post(
        "/internal/attendance/mark-absent",
        headers={"X-Cron-Secret": "test-cron-secret"},
        json={"startDate": "06/01/2025"},
    )

    assert resp.status_code == 400


def test_team_today_lists_the_viewer_and_counts(monkeypatch):
    client, _ = _client(monkeypatch)
    _login(client)

    body = client.get("/api/attendance/team-today").get_json()

    assert body["success"] is True
    assert [m["employeeId"] for m in body["data"]["members"]] == [1]
    assert body["data"]["meta"]["total"] == 1
