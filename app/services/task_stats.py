"""
Calendar helpers for request-time task statistics.
"""

from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import settings
from app.exceptions import ValidationError


def resolve_timezone(name: str | None) -> ZoneInfo:
    zone_name = name or settings.default_timezone
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        # OSError covers names that resolve to a zone directory, e.g. "America"
        raise ValidationError.single("tz", f"Unknown timezone: {zone_name}") from e


def day_bounds(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """
    Start (inclusive) and end (exclusive) of the local calendar day containing
    `now`, returned in UTC.
    """
    local_today = now.astimezone(tz).date()
    start = datetime.combine(local_today, time.min, tzinfo=tz)
    end = datetime.combine(local_today + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
