import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from shift_sync.models import ReviewShift, Shift
from shift_sync.timezones import local_timezone_name

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    shifts: list[ReviewShift]
    # non-fatal message for the user when the conflict check could not run
    advisory: Optional[str] = None


def date_bounds(shifts: list[Shift]) -> tuple[str, str]:
    """Smallest and largest shift date. ISO dates compare correctly as strings."""
    min_date = max_date = shifts[0].date
    for s in shifts[1:]:
        if s.date < min_date:
            min_date = s.date
        if s.date > max_date:
            max_date = s.date
    return min_date, max_date


def _parse_event_datetime(value: str) -> datetime:
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = f"{normalized[:-1]}+00:00"
    parsed = datetime.fromisoformat(normalized)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def _event_interval(event: dict) -> Optional[tuple[datetime, datetime]]:
    start = (event.get("start") or {}).get("dateTime")
    end = (event.get("end") or {}).get("dateTime")
    if not start or not end:
        # all-day events carry `date` only and never conflict
        return None
    try:
        return _parse_event_datetime(start), _parse_event_datetime(end)
    except ValueError:
        logger.warning(f"Skipping event {event.get('id')} with unreadable times")
        return None


def shift_interval(shift: Shift, tz: ZoneInfo) -> Optional[tuple[datetime, datetime]]:
    try:
        start, end = shift.local_bounds()
    except ValueError:
        logger.warning(
            f"Shift {shift.date} {shift.start_time}-{shift.end_time} has no real date or time, "
            "not checked for conflicts"
        )
        return None
    return start.replace(tzinfo=tz), end.replace(tzinfo=tz)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # half-open intervals: touching endpoints are not an overlap
    return a_start < b_end and a_end > b_start


class ConflictReconciler:

    def __init__(self, calendar):
        self.calendar = calendar

    async def reconcile(
        self,
        shifts: list[Shift],
        calendar_id: Optional[str],
        tz_name: Optional[str] = None,
    ) -> ReconciliationResult:
        if not shifts:
            return ReconciliationResult(shifts=[])
        if not calendar_id:
            return ReconciliationResult(shifts=[ReviewShift.from_shift(s) for s in shifts])

        min_date, max_date = date_bounds(shifts)
        try:
            events = await self.calendar.list_events(
                calendar_id,
                f"{min_date}T00:00:00Z",
                f"{max_date}T23:59:59Z",
            )
        except Exception as e:
            message = getattr(e, "user_message", None) or "Unknown error"
            logger.error(f"Error checking for conflicts: {e}")
            return ReconciliationResult(
                shifts=[ReviewShift.from_shift(s) for s in shifts],
                advisory=f"Could not check for calendar conflicts: {message}",
            )

        if not events:
            return ReconciliationResult(shifts=[ReviewShift.from_shift(s) for s in shifts])

        intervals = [iv for iv in (_event_interval(e) for e in events) if iv is not None]
        tz = ZoneInfo(tz_name or local_timezone_name())

        reviewed = []
        for shift in shifts:
            interval = shift_interval(shift, tz)
            conflicting = interval is not None and any(
                overlaps(*interval, ev_start, ev_end) for ev_start, ev_end in intervals
            )
            reviewed.append(ReviewShift.from_shift(shift, is_conflicting=conflicting))

        conflicts = sum(1 for s in reviewed if s.is_conflicting)
        if conflicts:
            logger.info(f"{conflicts} of {len(reviewed)} shifts overlap existing events")
        return ReconciliationResult(shifts=reviewed)
