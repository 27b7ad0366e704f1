"""Task Watch services module.

Classification, new-task detection, message formatting, notification state
and the check cycle. Imports are lazy so that importing one service does not
pull in the scheduler or Sentry.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Classification
    "ClassifiedTasks": ("taskwatch.services.classifier", "ClassifiedTasks"),
    "classify": ("taskwatch.services.classifier", "classify"),
    # Notification state
    "NotificationState": ("taskwatch.services.notification_state", "NotificationState"),
    "JsonFileStorage": ("taskwatch.services.notification_state", "JsonFileStorage"),
    "MemoryStorage": ("taskwatch.services.notification_state", "MemoryStorage"),
    "open_notification_state": (
        "taskwatch.services.notification_state",
        "open_notification_state",
    ),
    # New-task detection
    "detect_and_mark": ("taskwatch.services.detector", "detect_and_mark"),
    # Formatting
    "NOTHING_TO_REPORT": ("taskwatch.services.formatter", "NOTHING_TO_REPORT"),
    "format_new_task": ("taskwatch.services.formatter", "format_new_task"),
    "format_overview": ("taskwatch.services.formatter", "format_overview"),
    # Check cycle
    "CheckCycle": ("taskwatch.services.check_cycle", "CheckCycle"),
    "CycleOutcome": ("taskwatch.services.check_cycle", "CycleOutcome"),
    "CycleReport": ("taskwatch.services.check_cycle", "CycleReport"),
    # Scheduling
    "DailyScheduler": ("taskwatch.services.scheduler", "DailyScheduler"),
    # Timezone
    "TimezoneService": ("taskwatch.services.timezone", "TimezoneService"),
    "get_timezone_service": ("taskwatch.services.timezone", "get_timezone_service"),
}

__all__ = list(_EXPORTS)


def __getattr__(name: str) -> Any:
    try:
        module_name, attr = _EXPORTS[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from exc
    value = getattr(import_module(module_name), attr)
    globals()[name] = value
    return value
