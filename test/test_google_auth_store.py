import asyncio
from datetime import datetime

from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from google.oauth2.credentials import Credentials

from api.main import create_app
from api.state import AppState
from storage.google_auth import GoogleAuthStore
from storage.preferences_store import PreferencesStore
from wizard.session import WizardSession


def _store(tmp_path, monkeypatch, key=None):
    monkeypatch.setenv("GOOGLE_TOKEN_ENCRYPTION_KEY", key or Fernet.generate_key().decode())
    return GoogleAuthStore(path=str(tmp_path / "token.json"))


def test_tokens_are_encrypted_at_rest(tmp_path, monkeypatch):
    store = _store(tmp_path, monkeypatch)
    creds = Credentials(token="access-123", refresh_token="refresh-456", expiry=datetime(2030, 1, 1))
    asyncio.run(store.save_credentials(creds, "dana@example.com"))

    raw = (tmp_path / "token.json").read_text()
    assert "access-123" not in raw
    assert "refresh-456" not in raw

    loaded = asyncio.run(store.get_credentials())
    assert loaded.token == "access-123"
    assert loaded.refresh_token == "refresh-456"
    assert loaded.expiry == datetime(2030, 1, 1)
    assert asyncio.run(store.get_email()) == "dana@example.com"


def test_refresh_token_kept_when_not_reissued(tmp_path, monkeypatch):
    store = _store(tmp_path, monkeypatch)
    asyncio.run(store.save_credentials(Credentials(token="a1", refresh_token="r1"), "dana@example.com"))
    asyncio.run(store.save_credentials(Credentials(token="a2")))

    loaded = asyncio.run(store.get_credentials())
    assert loaded.token == "a2"
    assert loaded.refresh_token == "r1"
    assert asyncio.run(store.get_email()) == "dana@example.com"


def test_other_key_cannot_read(tmp_path, monkeypatch):
    store = _store(tmp_path, monkeypatch)
    asyncio.run(store.save_credentials(Credentials(token="a1")))
    other = _store(tmp_path, monkeypatch)
    assert asyncio.run(other.get_credentials()) is None


def test_delete_missing_file_is_fine(tmp_path, monkeypatch):
    store = _store(tmp_path, monkeypatch)
    asyncio.run(store.delete_credentials())
    assert asyncio.run(store.get_credentials()) is None


def test_startup_restores_connection(tmp_path, monkeypatch):
    store = _store(tmp_path, monkeypatch)
    asyncio.run(store.save_credentials(Credentials(token="a1", refresh_token="r1")))
    state = AppState(session=WizardSession(PreferencesStore(path=str(tmp_path / "prefs.json"))), auth_store=store)

    with TestClient(create_app(state)) as client:
        assert client.get("/auth/google/status").json()["connected"] is True
        assert client.get("/wizard").json()["signedIn"] is True

        assert client.post("/auth/google/disconnect").json() == {"status": "disconnected"}
        assert client.get("/auth/google/status").json()["connected"] is False
        assert client.get("/wizard").json()["signedIn"] is False

    assert not (tmp_path / "token.json").exists()


def test_callback_error_redirects_to_frontend(tmp_path, monkeypatch):
    state = AppState(session=WizardSession(), auth_store=_store(tmp_path, monkeypatch))
    client = TestClient(create_app(state))
    r = client.get("/auth/google/callback", params={"error": "access_denied"}, follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"].endswith("/?error=access_denied")
    assert state.calendar_gate.is_ready is False
