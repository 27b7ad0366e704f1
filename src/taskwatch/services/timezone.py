"""Timezone handling for Task Watch.

Every "now"-dependent computation (the overdue boundary, due-date rendering,
the daily trigger) goes through a single configured IANA zone rather than
the host's local zone, so results do not depend on where the process runs.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskwatch.config import settings

logger = logging.getLogger(__name__)

# Calendar format used in messages (day/month/year)
DATE_FORMAT = "%d/%m/%Y"


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as returned by Google Tasks.

    Example: "2024-01-15T00:00:00.000Z"

    Raises:
        ValueError: if the value is not a valid timestamp
    """
    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class TimezoneService:
    """Configured-zone clock, localization and date rendering."""

    def __init__(self, default_timezone: str | None = None):
        """Initialize timezone service.

        Args:
            default_timezone: IANA timezone name. Defaults to settings.user_timezone.
        """
        self._tz_name = default_timezone or settings.user_timezone
        try:
            self._tz = ZoneInfo(self._tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self._tz_name!r}, falling back to UTC")
            self._tz_name = "UTC"
            self._tz = ZoneInfo("UTC")

    @property
    def name(self) -> str:
        return self._tz_name

    @property
    def tzinfo(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        """Current time in the configured zone."""
        return datetime.now(self._tz)

    def localize(self, dt: datetime) -> datetime:
        """Attach the configured zone to a naive datetime or convert an aware one.

        A naive datetime is taken to be wall-clock time in the configured zone.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self._tz)
        return dt.astimezone(self._tz)

    def parse_due(self, value: str) -> datetime:
        """Parse a due timestamp into an aware datetime in the configured zone."""
        return self.localize(parse_rfc3339(value))

    def format_date(self, dt: datetime) -> str:
        """Render as dd/mm/yyyy in the configured zone."""
        return self.localize(dt).strftime(DATE_FORMAT)


# Module-level singleton
_timezone_service: TimezoneService | None = None


def get_timezone_service(default_timezone: str | None = None) -> TimezoneService:
    """Get the singleton TimezoneService instance.

    Args:
        default_timezone: Optional timezone to use. Only used on first call.
    """
    global _timezone_service
    if _timezone_service is None:
        _timezone_service = TimezoneService(default_timezone)
    return _timezone_service


def reset_timezone_service() -> None:
    """Reset the singleton (useful for testing)."""
    global _timezone_service
    _timezone_service = None
