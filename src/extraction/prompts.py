import os
from datetime import date
from typing import Optional


def reference_year() -> int:
    """Year used to expand two-digit schedule dates (17.08.25 -> 2025-08-17)."""
    raw = os.getenv("SCHEDULE_REFERENCE_YEAR", "").strip()
    return int(raw) if raw else date.today().year


def build_extraction_prompt(user_name: str, year: Optional[int] = None) -> str:
    year = year or reference_year()
    return f"""You are analyzing an image of a weekly work schedule table. The text may mix scripts (for example Hebrew and English). The table typically has:

1. A date column on the left (dates like 17.08.{year % 100:02d}, 18.08.{year % 100:02d}) - the year is {year}
2. Days of the week written in the schedule's own language
3. Location columns, one per work site, named in the column headers
4. Employee names in any script scattered throughout the cells
5. Time ranges such as "15:30-22:00" or "9-16"

Your task:
- Find ALL shifts specifically assigned to the name "{user_name}" (it could be written in any script)
- The name might appear with slight variations or partial matches
- Extract the date from the date column and convert DD.MM.YY to YYYY-MM-DD (the year is {year})
- Extract the day of the week exactly as written on the schedule
- Extract start and end times in 24-hour HH:MM format
- Extract the location from the column header above the cell
- Look carefully at colored cells, they often contain the employee assignments
- Be thorough and scan the entire image for any occurrence of the name

Return the result as JSON with a "shifts" array.

Examples of time conversion:
- "15:30-22:00" -> startTime: "15:30", endTime: "22:00"
- "9-16" -> startTime: "09:00", endTime: "16:00"
- "12-22" -> startTime: "12:00", endTime: "22:00"
"""
