"""Normalized task records."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taskwatch.services.timezone import TimezoneService, get_timezone_service

logger = logging.getLogger(__name__)

UNTITLED = "(untitled)"


@dataclass(frozen=True)
class TaskRecord:
    """A single task as seen by the classifier.

    `due` is None both when the task has no due date and when the upstream
    value could not be parsed; `due_raw` keeps the original string.
    """

    id: str
    title: str
    due: datetime | None = None
    due_raw: str | None = None

    @property
    def display_title(self) -> str:
        return self.title.strip() or UNTITLED

    @classmethod
    def from_api(
        cls,
        item: dict[str, Any],
        timezone: TimezoneService | None = None,
    ) -> "TaskRecord":
        """Build a record from a Google Tasks API resource.

        Raises:
            ValueError: if the item has no id
        """
        task_id = item.get("id")
        if not task_id:
            raise ValueError("task item has no id")

        tz = timezone or get_timezone_service()
        due_raw = item.get("due") or None
        due = None
        if due_raw:
            try:
                due = tz.parse_due(due_raw)
            except (TypeError, ValueError):
                logger.warning(f"Task {task_id}: unparseable due {due_raw!r}, treating as no due date")

        return cls(
            id=str(task_id),
            title=item.get("title") or "",
            due=due,
            due_raw=due_raw,
        )
