import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

LOCALTIME_PATH = Path("/etc/localtime")


def _zone_from_localtime() -> str | None:
    try:
        target = os.path.realpath(LOCALTIME_PATH)
    except OSError:
        return None
    marker = "zoneinfo/"
    if marker not in target:
        return None
    return target.split(marker, 1)[1]


def _is_valid_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_timezone_name() -> str:
    """IANA name of the viewer's zone, resolved from the runtime environment."""
    for candidate in (
        os.getenv("SHIFT_SYNC_TIMEZONE", "").strip(),
        os.getenv("TZ", "").strip().lstrip(":"),
        _zone_from_localtime(),
    ):
        if candidate and _is_valid_zone(candidate):
            return candidate
    logger.warning("Could not resolve a local time zone, falling back to UTC")
    return "UTC"
