"""Tests for new-task and overview message formatting."""

from datetime import datetime
from zoneinfo import ZoneInfo

from taskwatch.models import TaskRecord
from taskwatch.services.classifier import classify
from taskwatch.services.formatter import (
    NOTHING_TO_REPORT,
    OVERDUE_HEADER,
    OVERVIEW_HEADER,
    UPCOMING_HEADER,
    format_classified,
    format_new_task,
    format_overview,
)
from taskwatch.services.timezone import TimezoneService

UTC = ZoneInfo("UTC")


def _task(task_id: str, title: str, due: datetime | None = None) -> TaskRecord:
    return TaskRecord(id=task_id, title=title, due=due)


class TestFormatNewTask:
    def test_contains_title(self):
        message = format_new_task(_task("a", "Buy milk"))

        assert message == "\nNew task: Buy milk"

    def test_untitled_task(self):
        message = format_new_task(_task("a", "   "))

        assert "(untitled)" in message


class TestFormatOverviewEmpty:
    def test_all_empty_returns_sentinel(self, tz):
        assert format_overview([], [], [], timezone=tz) is NOTHING_TO_REPORT

    def test_sentinel_is_none(self):
        assert NOTHING_TO_REPORT is None


class TestFormatOverview:
    def test_full_layout(self, tz):
        """Overdue section, blank line, then upcoming with undated last."""
        a = _task("a", "Task A", datetime(2026, 10, 17, tzinfo=UTC))
        b = _task("b", "Task B", datetime(2026, 10, 19, tzinfo=UTC))
        c = _task("c", "Task C")

        message = format_overview([a], [b], [c], timezone=tz)

        assert message == (
            "📋 *Tasks Overview*:\n"
            "\n"
            "⚠️ *Overdue Tasks*:\n"
            "\n"
            "- *Task A* | _Overdue: 17/10/2026_\n"
            "\n"
            "\n"
            "✅ *Upcoming Tasks*:\n"
            "\n"
            "- *Task B* | Due: 19/10/2026\n"
            "- *Task C*"
        )

    def test_only_overdue(self, tz):
        a = _task("a", "Late report", datetime(2026, 10, 1, tzinfo=UTC))

        message = format_overview([a], [], [], timezone=tz)

        assert OVERDUE_HEADER in message
        assert UPCOMING_HEADER not in message
        assert message.endswith("- *Late report* | _Overdue: 01/10/2026_")

    def test_only_upcoming_has_no_separator(self, tz):
        b = _task("b", "Dentist", datetime(2026, 10, 20, tzinfo=UTC))

        message = format_overview([], [b], [], timezone=tz)

        assert OVERDUE_HEADER not in message
        assert message == f"{OVERVIEW_HEADER}\n{UPCOMING_HEADER}\n- *Dentist* | Due: 20/10/2026"

    def test_only_undated_goes_under_upcoming(self, tz):
        c = _task("c", "Someday")

        message = format_overview([], [], [c], timezone=tz)

        assert UPCOMING_HEADER in message
        assert message.endswith("- *Someday*")
        assert "Due:" not in message

    def test_dates_rendered_in_configured_zone(self):
        """23:30 UTC on the 19th is already the 20th in Jakarta."""
        b = _task("b", "Call", datetime(2026, 10, 19, 23, 30, tzinfo=UTC))

        jakarta = format_overview([], [b], [], timezone=TimezoneService("Asia/Jakarta"))
        utc = format_overview([], [b], [], timezone=TimezoneService("UTC"))

        assert "Due: 20/10/2026" in jakarta
        assert "Due: 19/10/2026" in utc

    def test_keeps_given_order(self, tz):
        tasks = [
            _task("1", "First", datetime(2026, 10, 20, tzinfo=UTC)),
            _task("2", "Second", datetime(2026, 10, 21, tzinfo=UTC)),
        ]

        message = format_overview([], tasks, [], timezone=tz)

        assert message.index("First") < message.index("Second")


class TestFormatClassified:
    def test_matches_format_overview(self, tz, now, make_task):
        tasks = [make_task("a", days=-1), make_task("b", days=1), make_task("c")]
        classified = classify(tasks, now)

        assert format_classified(classified, timezone=tz) == format_overview(
            classified.overdue,
            classified.upcoming,
            classified.no_due_date,
            timezone=tz,
        )

    def test_empty_classification(self, tz, now):
        assert format_classified(classify([], now), timezone=tz) is NOTHING_TO_REPORT
