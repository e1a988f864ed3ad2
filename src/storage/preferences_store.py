from __future__ import annotations

import json
import logging
from pathlib import Path

from shift_sync.models import UserPreferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """User name, sign-in flag and last selected calendar, kept in a JSON file."""

    def __init__(self, path: str = "data/preferences.json"):
        self.path = Path(path)

    def load(self) -> UserPreferences:
        try:
            if not self.path.exists():
                return UserPreferences()

            data = json.loads(self.path.read_text(encoding="utf-8"))
            return UserPreferences(**data)
        except Exception as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return UserPreferences()

    def save(self, prefs: UserPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(prefs.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def clear_session(self) -> UserPreferences:
        """Forget sign-in and calendar choice, keep the user name."""
        prefs = self.load().model_copy(
            update={"signed_in": False, "selected_calendar_id": None}
        )
        self.save(prefs)
        return prefs
