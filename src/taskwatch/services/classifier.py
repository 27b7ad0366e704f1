"""Partition tasks by due-date status.

Groups at an evaluation instant `now`:
- Overdue: due < now
- Upcoming: due >= now (a task due exactly now is upcoming)
- No due date: due absent or unparseable

Overdue and upcoming are sorted ascending by due; ties and the no-due-date
group keep input order.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from taskwatch.models import TaskRecord


@dataclass
class ClassifiedTasks:
    """Result of classify()."""

    overdue: list[TaskRecord] = field(default_factory=list)
    upcoming: list[TaskRecord] = field(default_factory=list)
    no_due_date: list[TaskRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.overdue or self.upcoming or self.no_due_date)

    @property
    def total(self) -> int:
        return len(self.overdue) + len(self.upcoming) + len(self.no_due_date)

    def ordered(self) -> list[TaskRecord]:
        """All tasks in rendering order: overdue, upcoming, then no due date."""
        return [*self.overdue, *self.upcoming, *self.no_due_date]


def _due_key(task: TaskRecord) -> datetime:
    assert task.due is not None
    return task.due


def classify(tasks: Iterable[TaskRecord], now: datetime) -> ClassifiedTasks:
    """Split tasks into overdue, upcoming and no-due-date groups.

    Args:
        tasks: Task records in upstream order
        now: Timezone-aware evaluation instant

    Raises:
        ValueError: if `now` is naive
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    result = ClassifiedTasks()
    for task in tasks:
        if task.due is None:
            result.no_due_date.append(task)
        elif task.due < now:
            result.overdue.append(task)
        else:
            result.upcoming.append(task)

    # list.sort is stable, so equal due dates keep input order
    result.overdue.sort(key=_due_key)
    result.upcoming.sort(key=_due_key)
    return result
