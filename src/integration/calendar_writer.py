import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from shift_sync.errors import NothingSelectedError
from shift_sync.models import Shift
from shift_sync.timezones import local_timezone_name

logger = logging.getLogger(__name__)


def build_event_payload(shift: Shift, tz_name: str) -> dict[str, Any]:
    """Google event body for one shift; raises ValueError for an impossible date or time."""
    start, end = shift.local_bounds()
    return {
        "summary": f"Work Shift: {shift.location}",
        "location": shift.location,
        "description": f"Shift at {shift.location}",
        "start": {
            "dateTime": start.strftime("%Y-%m-%dT%H:%M:%S"),
            "timeZone": tz_name,
        },
        "end": {
            "dateTime": end.strftime("%Y-%m-%dT%H:%M:%S"),
            "timeZone": tz_name,
        },
    }


@dataclass
class InsertOutcome:
    shift: Shift
    event_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class WriteReport:
    outcomes: list[InsertOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def succeeded(self) -> list[InsertOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[InsertOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def summary(self) -> str:
        if self.ok:
            return f"Added {len(self.outcomes)} shifts to your calendar."
        first = self.failed[0].error or "Unknown error"
        return (
            f"Failed to add events: {first} "
            f"({len(self.succeeded)} of {len(self.outcomes)} shifts were added)"
        )


class CalendarWriter:
    """Inserts one calendar event per selected shift.

    All inserts of a batch are issued at once and the batch only counts as
    successful when every insert succeeded. Events that did get created stay
    in the calendar; the report says which ones.
    """

    def __init__(self, calendar):
        self.calendar = calendar

    async def _insert(self, shift: Shift, calendar_id: str, tz_name: str) -> InsertOutcome:
        try:
            body = build_event_payload(shift, tz_name)
        except ValueError:
            message = f"Invalid shift time: {shift.date} {shift.start_time}-{shift.end_time}"
            logger.error(message)
            return InsertOutcome(shift=shift, error=message)
        try:
            event = await self.calendar.insert_event(calendar_id, body)
        except Exception as e:
            message = getattr(e, "user_message", None) or str(e) or "Unknown error"
            logger.error(f"Failed to insert shift {shift.date} {shift.start_time}: {message}")
            return InsertOutcome(shift=shift, error=message)
        return InsertOutcome(shift=shift, event_id=(event or {}).get("id"))

    async def write(
        self,
        selected: list[Shift],
        calendar_id: str,
        tz_name: Optional[str] = None,
    ) -> WriteReport:
        if not selected:
            raise NothingSelectedError()

        tz_name = tz_name or local_timezone_name()
        logger.info(f"Adding {len(selected)} shifts to calendar {calendar_id} ({tz_name})")

        outcomes = await asyncio.gather(
            *(self._insert(shift, calendar_id, tz_name) for shift in selected)
        )
        report = WriteReport(outcomes=list(outcomes))
        if not report.ok:
            logger.warning(
                f"Insert batch failed: {len(report.failed)} of {len(outcomes)} inserts failed"
            )
        return report
