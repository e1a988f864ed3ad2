from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Shape only: 2025-13-40 and 99:99 pass, see wall_clock
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"
TIME_PATTERN = r"^[0-9]{2}:[0-9]{2}$"

WRITABLE_ROLES = {"owner", "writer"}


def wall_clock(date: str, hhmm: str) -> datetime:
    """Naive local datetime for a shift date and HH:MM time.

    "24:00" is midnight at the end of `date`. Raises ValueError for values that
    match the patterns but name no real date or time.
    """
    day = datetime.strptime(date, "%Y-%m-%d")
    if hhmm == "24:00":
        return day + timedelta(days=1)
    t = datetime.strptime(hhmm, "%H:%M")
    return day.replace(hour=t.hour, minute=t.minute)


class Shift(BaseModel):
    """One work interval read off the schedule image.

    Wire names are camelCase (dayOfWeek, startTime, ...) to match the model
    output and the JSON handed to the frontend.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: str = Field(..., min_length=1, pattern=DATE_PATTERN)
    # informational only, never checked against `date`
    day_of_week: str = Field(..., min_length=1)
    start_time: str = Field(..., min_length=1, pattern=TIME_PATTERN)
    end_time: str = Field(..., min_length=1, pattern=TIME_PATTERN)
    location: str = Field(..., min_length=1)

    def local_bounds(self) -> tuple[datetime, datetime]:
        return wall_clock(self.date, self.start_time), wall_clock(self.date, self.end_time)


class ReviewShift(Shift):
    is_conflicting: bool = False
    selected: bool = True

    @classmethod
    def from_shift(cls, shift: Shift, is_conflicting: bool = False) -> "ReviewShift":
        base = shift.model_dump(include=set(Shift.model_fields))
        return cls(**base, is_conflicting=is_conflicting, selected=True)


class Calendar(BaseModel):
    id: str
    summary: str = ""
    access_role: str = "reader"

    @field_validator("summary", mode="before")
    @classmethod
    def summary_fallback(cls, v: Optional[str]) -> str:
        return v or ""

    @property
    def writable(self) -> bool:
        return self.access_role in WRITABLE_ROLES


class WizardStep(str, Enum):
    CONFIG = "CONFIG"
    UPLOAD = "UPLOAD"
    REVIEW = "REVIEW"
    ADDING = "ADDING"
    DONE = "DONE"


class UserPreferences(BaseModel):
    """Small key/value state kept between runs (not a durable store)."""

    user_name: str = ""
    signed_in: bool = False
    selected_calendar_id: Optional[str] = None
