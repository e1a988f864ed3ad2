import pytest

from extraction.image_encoder import encode_image
from shift_sync.models import Shift


class FakeProvider:
    def __init__(self, response_text: str = "", error: Exception | None = None):
        self._response_text = response_text
        self._error = error
        self.calls = []

    def generate(self, *, prompt: str, image=None, schema=None, model=None) -> str:
        self.calls.append({"prompt": prompt, "image": image, "schema": schema})
        if self._error is not None:
            raise self._error
        return self._response_text


class FakeCalendar:
    """Stands in for CalendarIntegration; records every call."""

    def __init__(self, events=None, calendars=None, list_error=None, fail_on=()):
        self.events = events or []
        self.calendars = calendars or []
        self.list_error = list_error
        self.fail_on = set(fail_on)
        self.list_calls = []
        self.inserted = []

    async def list_calendars(self):
        return list(self.calendars)

    async def list_events(self, calendar_id, time_min, time_max):
        self.list_calls.append((calendar_id, time_min, time_max))
        if self.list_error is not None:
            raise self.list_error
        return list(self.events)

    async def insert_event(self, calendar_id, body):
        if body["start"]["dateTime"][:10] in self.fail_on:
            raise RuntimeError(f"Rate Limit Exceeded for {body['start']['dateTime']}")
        self.inserted.append((calendar_id, body))
        return {"id": f"evt-{len(self.inserted)}"}


def make_shift(date="2025-08-18", start="15:30", end="22:00", location="ASICS", day="שני"):
    return Shift(date=date, day_of_week=day, start_time=start, end_time=end, location=location)


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "", error: Exception | None = None):
        return FakeProvider(response_text, error)
    return _make


@pytest.fixture
def fake_calendar_factory():
    return FakeCalendar


@pytest.fixture
def sample_image():
    return encode_image(b"\x89PNG fake schedule", "image/png")


@pytest.fixture
def shift_factory():
    return make_shift
