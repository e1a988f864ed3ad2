import asyncio
import json
import logging
from typing import Any, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from shift_sync.errors import CalendarError
from shift_sync.models import Calendar

logger = logging.getLogger(__name__)


def _error_message(exc: Exception) -> str:
    """Best human-readable message from a Google API failure."""
    if isinstance(exc, HttpError):
        try:
            payload = json.loads(exc.content.decode("utf-8"))
            message = payload.get("error", {}).get("message")
            if message:
                return message
        except (ValueError, AttributeError):
            pass
        if exc.reason:
            return exc.reason
    return str(exc) or "Unknown error"


def pick_default_calendar(calendars: list[Calendar]) -> Optional[Calendar]:
    """Prefer a calendar whose name mentions work, else the first one."""
    if not calendars:
        return None
    for cal in calendars:
        if "work" in cal.summary.lower():
            return cal
    return calendars[0]


class CalendarIntegration:
    """Google Calendar v3 access for one signed-in user.

    The google client is blocking, so every public call runs in a worker
    thread. Each call builds its own service object: httplib2 transports are
    not thread-safe and inserts for one batch run concurrently.
    """

    def __init__(self, credentials=None):
        self.credentials = credentials

    def _service(self):
        return build(
            "calendar",
            "v3",
            credentials=self.credentials,
            cache_discovery=False,
        )

    def _list_calendars_sync(self) -> list[Calendar]:
        service = self._service()
        items: list[Calendar] = []
        page_token = None
        while True:
            feed = service.calendarList().list(pageToken=page_token).execute()
            for c in feed.get("items", []):
                items.append(
                    Calendar(
                        id=c["id"],
                        summary=c.get("summary", c["id"]),
                        access_role=c.get("accessRole", "reader"),
                    )
                )
            page_token = feed.get("nextPageToken")
            if not page_token:
                break
        return [c for c in items if c.writable]

    def _list_events_sync(self, calendar_id: str, time_min: str, time_max: str) -> list[dict]:
        service = self._service()
        events: list[dict] = []
        page_token = None
        while True:
            resp = service.events().list(
                calendarId=calendar_id,
                timeMin=time_min,
                timeMax=time_max,
                singleEvents=True,
                orderBy="startTime",
                pageToken=page_token,
            ).execute()
            events.extend(resp.get("items", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
        return events

    def _insert_event_sync(self, calendar_id: str, body: dict[str, Any]) -> dict:
        service = self._service()
        return service.events().insert(calendarId=calendar_id, body=body).execute()

    async def list_calendars(self) -> list[Calendar]:
        """Calendars the user can write to (owner or writer role)."""
        try:
            return await asyncio.to_thread(self._list_calendars_sync)
        except Exception as e:
            logger.error(f"Error listing calendars: {e}")
            raise CalendarError(f"Failed to list calendars: {_error_message(e)}") from e

    async def list_events(self, calendar_id: str, time_min: str, time_max: str) -> list[dict]:
        try:
            return await asyncio.to_thread(
                self._list_events_sync, calendar_id, time_min, time_max
            )
        except Exception as e:
            logger.error(f"Error listing events for {calendar_id}: {e}")
            raise CalendarError(_error_message(e)) from e

    async def insert_event(self, calendar_id: str, body: dict[str, Any]) -> dict:
        try:
            return await asyncio.to_thread(self._insert_event_sync, calendar_id, body)
        except Exception as e:
            logger.error(f"Error inserting event into {calendar_id}: {e}")
            raise CalendarError(_error_message(e)) from e
