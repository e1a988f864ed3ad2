from shift_sync.models import UserPreferences
from storage.preferences_store import PreferencesStore


def test_preferences_roundtrip(tmp_path):
    store = PreferencesStore(path=str(tmp_path / "prefs.json"))
    store.save(UserPreferences(user_name="דנה", signed_in=True, selected_calendar_id="work"))
    loaded = store.load()
    assert loaded.user_name == "דנה"
    assert loaded.signed_in is True
    assert loaded.selected_calendar_id == "work"


def test_preferences_missing_file(tmp_path):
    prefs = PreferencesStore(path=str(tmp_path / "nope" / "prefs.json")).load()
    assert prefs == UserPreferences()


def test_preferences_corrupted_file(tmp_path):
    p = tmp_path / "prefs.json"
    p.write_text("{not valid json")
    prefs = PreferencesStore(path=str(p)).load()
    assert isinstance(prefs, UserPreferences)
    assert prefs.signed_in is False


def test_clear_session_keeps_name(tmp_path):
    store = PreferencesStore(path=str(tmp_path / "prefs.json"))
    store.save(UserPreferences(user_name="Dana", signed_in=True, selected_calendar_id="work"))
    cleared = store.clear_session()
    assert cleared.user_name == "Dana"
    assert store.load().selected_calendar_id is None
    assert store.load().signed_in is False
