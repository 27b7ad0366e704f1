"""One scheduled pass over the task list.

fetch -> classify -> detect new -> flush state -> dispatch

A cycle ends either "dispatched" (at least one message was attempted) or
"skipped" (nothing to report). Fetch and auth failures propagate to the
caller before any state is touched. Delivery and flush failures are logged
and never abort the cycle.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from taskwatch.errors import DeliveryError, StorageError
from taskwatch.models import TaskRecord
from taskwatch.notify.base import Notifier
from taskwatch.sentry import add_breadcrumb, capture_exception
from taskwatch.services.classifier import ClassifiedTasks, classify
from taskwatch.services.detector import detect_and_mark
from taskwatch.services.formatter import (
    NOTHING_TO_REPORT,
    format_classified,
    format_new_task,
)
from taskwatch.services.notification_state import NotificationState
from taskwatch.services.timezone import TimezoneService, get_timezone_service

logger = logging.getLogger(__name__)


class Authorizer(Protocol):
    def get_credential(self) -> Any: ...


class TaskSource(Protocol):
    def list_tasks(self, credential: Any, include_completed: bool = False) -> list[TaskRecord]: ...


class CycleOutcome(str, Enum):
    DISPATCHED = "dispatched"
    SKIPPED = "skipped"


@dataclass
class DeliveryResult:
    """Outcome of one message send."""

    kind: str  # "new_task" or "overview"
    success: bool
    task_id: str | None = None
    error: str | None = None


@dataclass
class CycleReport:
    """Summary of a check cycle."""

    started_at: datetime
    outcome: CycleOutcome = CycleOutcome.SKIPPED
    overdue: int = 0
    upcoming: int = 0
    no_due_date: int = 0
    new_task_ids: list[str] = field(default_factory=list)
    deliveries: list[DeliveryResult] = field(default_factory=list)
    state_flushed: bool = False
    state_error: str | None = None

    @property
    def sent(self) -> int:
        return sum(1 for d in self.deliveries if d.success)

    @property
    def failed(self) -> int:
        return sum(1 for d in self.deliveries if not d.success)

    @property
    def all_delivered(self) -> bool:
        return self.failed == 0


class CheckCycle:
    """Runs check cycles against one task source, notifier and state.

    Cycles never overlap: a run requested while another is in flight is
    skipped and returns None.
    """

    def __init__(
        self,
        authorizer: Authorizer,
        source: TaskSource,
        notifier: Notifier,
        state: NotificationState,
        timezone: TimezoneService | None = None,
    ):
        self.authorizer = authorizer
        self.source = source
        self.notifier = notifier
        self.state = state
        self.timezone = timezone or get_timezone_service()
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def run(self, now: datetime | None = None) -> CycleReport | None:
        """Run one cycle.

        Args:
            now: Evaluation instant (defaults to now in the configured zone)

        Returns:
            CycleReport, or None if another cycle was already running

        Raises:
            AuthError: if no credential is available
            FetchError: if the task list could not be read
        """
        if self._lock.locked():
            logger.warning("Check cycle already in progress, skipping this trigger")
            return None

        async with self._lock:
            return await self._run(now)

    async def _run(self, now: datetime | None) -> CycleReport:
        now = self.timezone.localize(now) if now is not None else self.timezone.now()
        report = CycleReport(started_at=now)
        add_breadcrumb("Check cycle started", category="cycle")

        tasks = await self._fetch()

        classified = classify(tasks, now)
        report.overdue = len(classified.overdue)
        report.upcoming = len(classified.upcoming)
        report.no_due_date = len(classified.no_due_date)
        logger.info(
            f"Classified {classified.total} task(s): {report.overdue} overdue, "
            f"{report.upcoming} upcoming, {report.no_due_date} without due date"
        )

        new_tasks = detect_and_mark(classified.upcoming, self.state)
        report.new_task_ids = [task.id for task in new_tasks]

        self._flush_state(report)

        report.deliveries = await self._dispatch(new_tasks, classified)
        if report.deliveries:
            report.outcome = CycleOutcome.DISPATCHED

        logger.info(
            f"Check cycle {report.outcome.value}: {report.sent} sent, {report.failed} failed"
        )
        return report

    async def _fetch(self) -> list[TaskRecord]:
        loop = asyncio.get_running_loop()
        credential = await loop.run_in_executor(None, self.authorizer.get_credential)
        return await loop.run_in_executor(
            None,
            lambda: self.source.list_tasks(credential, include_completed=False),
        )

    def _flush_state(self, report: CycleReport) -> None:
        if not self.state.dirty:
            return
        try:
            self.state.flush()
            report.state_flushed = True
        except StorageError as e:
            report.state_error = str(e)
            logger.warning(f"Failed to save notification state: {e}")
            capture_exception(e)

    async def _dispatch(
        self,
        new_tasks: list[TaskRecord],
        classified: ClassifiedTasks,
    ) -> list[DeliveryResult]:
        results = list(
            await asyncio.gather(
                *(
                    self._send("new_task", format_new_task(task), task_id=task.id)
                    for task in new_tasks
                )
            )
        )

        overview = format_classified(classified, timezone=self.timezone)
        if overview is NOTHING_TO_REPORT:
            logger.info("No tasks to notify.")
        else:
            results.append(await self._send("overview", overview))

        return results

    async def _send(
        self,
        kind: str,
        message: str,
        task_id: str | None = None,
    ) -> DeliveryResult:
        label = f"{kind} {task_id}" if task_id else kind
        try:
            await self.notifier.send(message)
        except DeliveryError as e:
            logger.error(f"Failed to deliver {label}: {e}")
            return DeliveryResult(kind=kind, success=False, task_id=task_id, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error delivering {label}: {e}")
            return DeliveryResult(kind=kind, success=False, task_id=task_id, error=str(e))

        logger.info(f"Delivered {label}")
        return DeliveryResult(kind=kind, success=True, task_id=task_id)
