"""Message formatting for new-task alerts and the daily overview.

The overview follows this layout:
- 📋 header
- ⚠️ OVERDUE - title with "Overdue: dd/mm/yyyy"
- ✅ UPCOMING - title with "Due: dd/mm/yyyy", then undated tasks with no suffix

Markup uses single asterisks for bold and underscores for italics, which
LINE and Telegram (legacy Markdown) both display sensibly.
"""

from collections.abc import Sequence

from taskwatch.models import TaskRecord
from taskwatch.services.classifier import ClassifiedTasks
from taskwatch.services.timezone import TimezoneService, get_timezone_service

# Returned by format_overview when there is nothing to send
NOTHING_TO_REPORT = None

OVERVIEW_HEADER = "📋 *Tasks Overview*:\n"
OVERDUE_HEADER = "⚠️ *Overdue Tasks*:\n"
UPCOMING_HEADER = "✅ *Upcoming Tasks*:\n"


def format_new_task(task: TaskRecord) -> str:
    """Announce a single new task.

    The leading newline keeps the title off the line LINE Notify uses for
    the sender name.
    """
    return f"\nNew task: {task.display_title}"


def _overdue_line(task: TaskRecord, tz: TimezoneService) -> str:
    assert task.due is not None
    return f"*{task.display_title}* | _Overdue: {tz.format_date(task.due)}_"


def _upcoming_line(task: TaskRecord, tz: TimezoneService) -> str:
    if task.due is None:
        return f"*{task.display_title}*"
    return f"*{task.display_title}* | Due: {tz.format_date(task.due)}"


def format_overview(
    overdue: Sequence[TaskRecord],
    upcoming: Sequence[TaskRecord],
    no_due_date: Sequence[TaskRecord],
    timezone: TimezoneService | None = None,
) -> str | None:
    """Render the overview of all open tasks.

    Undated tasks share the upcoming section, after the dated ones.

    Returns:
        The message, or NOTHING_TO_REPORT if all three groups are empty
    """
    if not (overdue or upcoming or no_due_date):
        return NOTHING_TO_REPORT

    tz = timezone or get_timezone_service()

    parts = [OVERVIEW_HEADER]

    if overdue:
        parts.append(OVERDUE_HEADER)
        parts.extend(f"- {_overdue_line(task, tz)}" for task in overdue)

    pending = [*upcoming, *no_due_date]
    if pending:
        if overdue:
            parts.append("\n")
        parts.append(UPCOMING_HEADER)
        parts.extend(f"- {_upcoming_line(task, tz)}" for task in pending)

    return "\n".join(parts)


def format_classified(
    classified: ClassifiedTasks,
    timezone: TimezoneService | None = None,
) -> str | None:
    """format_overview() over a classify() result."""
    return format_overview(
        classified.overdue,
        classified.upcoming,
        classified.no_due_date,
        timezone=timezone,
    )
