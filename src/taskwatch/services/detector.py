"""Pick out upcoming tasks that have not been announced yet."""

import logging
from collections.abc import Iterable

from taskwatch.models import TaskRecord
from taskwatch.services.notification_state import NotificationState

logger = logging.getLogger(__name__)


def detect_and_mark(
    upcoming: Iterable[TaskRecord],
    state: NotificationState,
) -> list[TaskRecord]:
    """Return upcoming tasks not yet in `state`, marking each as notified.

    Only tasks from the upcoming group should be passed in: overdue and
    undated tasks never get an individual announcement.

    Marking happens before the caller dispatches anything, and a failed
    dispatch is not rolled back.

    Args:
        upcoming: Upcoming tasks in rendering order
        state: Loaded notification state (mutated in memory)

    Returns:
        New tasks in the same relative order, each id at most once
    """
    new_tasks: list[TaskRecord] = []
    for task in upcoming:
        if state.contains(task.id):
            continue
        state.add(task.id)
        new_tasks.append(task)

    if new_tasks:
        logger.info(f"Detected {len(new_tasks)} new task(s)")
    return new_tasks
