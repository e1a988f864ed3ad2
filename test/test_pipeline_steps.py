import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.state import AppState
from shift_sync.models import Calendar
from storage.preferences_store import PreferencesStore
from wizard.session import WizardSession


CALENDARS = [
    Calendar(id="me@example.com", summary="Me", access_role="owner"),
    Calendar(id="work@example.com", summary="Work", access_role="writer"),
]

# overlaps the 15:30-22:00 shift on 2025-08-19 (mock provider output)
BUSY = {"start": {"dateTime": "2025-08-19T16:00:00Z"}, "end": {"dateTime": "2025-08-19T17:00:00Z"}}


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("SHIFT_SYNC_TIMEZONE", "UTC")


def _client(tmp_path, calendar=None):
    session = WizardSession(PreferencesStore(path=str(tmp_path / "prefs.json")))
    state = AppState(session=session)
    if calendar is not None:
        state.calendar_gate.resolve(calendar)
        session.sign_in()
    return TestClient(create_app(state)), state


def _to_review(client):
    assert client.get("/calendars").json()["selectedCalendarId"] == "work@example.com"
    assert client.put("/wizard/config", json={"user_name": "Dana"}).status_code == 200
    assert client.post("/wizard/continue").json()["step"] == "upload"
    r = client.post("/wizard/image", files={"file": ("schedule.png", b"\x89PNG fake", "image/png")})
    assert r.json()["hasImage"] is True
    return client.post("/wizard/extract")


def test_full_wizard_flow(tmp_path, fake_calendar_factory):
    calendar = fake_calendar_factory(events=[BUSY], calendars=CALENDARS)
    client, _ = _client(tmp_path, calendar)

    r = _to_review(client)
    assert r.status_code == 200
    body = r.json()
    assert body["step"] == "review"
    assert [s["date"] for s in body["shifts"]] == ["2025-08-17", "2025-08-19", "2025-08-21"]
    assert [s["isConflicting"] for s in body["shifts"]] == [False, True, False]
    assert all(s["selected"] for s in body["shifts"])

    r = client.post("/wizard/shifts/1/toggle")
    assert r.json()["shifts"][1]["selected"] is False

    r = client.post("/wizard/add")
    assert r.status_code == 200
    assert r.json()["step"] == "done"
    assert [body["start"]["dateTime"] for _, body in calendar.inserted] == [
        "2025-08-17T09:00:00",
        "2025-08-21T12:00:00",
    ]
    assert all(cid == "work@example.com" for cid, _ in calendar.inserted)

    assert client.post("/wizard/start-over").json()["step"] == "config"


def test_partial_insert_failure_returns_to_review(tmp_path, fake_calendar_factory):
    calendar = fake_calendar_factory(calendars=CALENDARS, fail_on={"2025-08-21"})
    client, state = _client(tmp_path, calendar)
    _to_review(client)

    r = client.post("/wizard/add")
    assert r.status_code == 502
    body = r.json()
    assert body["error"] == "insert_batch_failed"
    assert "2 of 3" in body["detail"]
    assert body["wizard"]["step"] == "review"
    assert len(calendar.inserted) == 2
    assert state.session.error.startswith("Failed to add events:")


def test_conflict_check_failure_is_advisory(tmp_path, fake_calendar_factory):
    from shift_sync.errors import CalendarError

    calendar = fake_calendar_factory(calendars=CALENDARS, list_error=CalendarError("Insufficient Permission"))
    client, _ = _client(tmp_path, calendar)
    body = _to_review(client).json()
    assert body["step"] == "review"
    assert body["advisory"] == "Could not check for calendar conflicts: Insufficient Permission"
    assert not any(s["isConflicting"] for s in body["shifts"])


def test_action_at_wrong_step_is_rejected(tmp_path, fake_calendar_factory):
    client, _ = _client(tmp_path, fake_calendar_factory(calendars=CALENDARS))
    r = client.post("/wizard/extract")
    assert r.status_code == 409
    assert r.json()["error"] == "invalid_transition"


def test_cannot_continue_without_config(tmp_path):
    client, _ = _client(tmp_path)
    client.put("/wizard/config", json={"user_name": "Dana"})
    r = client.post("/wizard/continue")
    assert r.status_code == 409
    assert client.get("/wizard").json()["step"] == "config"


def test_toggle_unknown_index(tmp_path, fake_calendar_factory):
    client, _ = _client(tmp_path, fake_calendar_factory(calendars=CALENDARS))
    _to_review(client)
    assert client.post("/wizard/shifts/9/toggle").status_code == 404


def test_extraction_misconfigured_provider(tmp_path, monkeypatch, fake_calendar_factory):
    client, state = _client(tmp_path, fake_calendar_factory(calendars=CALENDARS))
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.setenv("GEMINI_API_KEY", "YOUR_GEMINI_API_KEY")

    r = _to_review(client)
    assert r.status_code == 500
    assert r.json()["error"] == "configuration_error"
    snap = client.get("/wizard").json()
    assert snap["step"] == "upload"
    assert snap["error"]


def test_health_reports_calendar_gate(tmp_path, fake_calendar_factory):
    client, _ = _client(tmp_path, fake_calendar_factory(calendars=CALENDARS))
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["calendar_connected"] is True
    assert body["wizard_step"] == "config"
