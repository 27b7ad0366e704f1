"""Daily trigger for the check cycle.

Uses APScheduler's asyncio scheduler with a cron trigger evaluated in the
configured timezone. `max_instances=1` together with the cycle's own lock
keeps runs from overlapping.

Failure policy per trigger:
- FetchError: logged, the next day's trigger tries again
- AuthError: fatal, run_forever() stops and re-raises it
"""

import asyncio
import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from taskwatch.errors import AuthError, FetchError
from taskwatch.services.check_cycle import CheckCycle, CycleReport
from taskwatch.services.timezone import TimezoneService, get_timezone_service

logger = logging.getLogger(__name__)

JOB_ID = "daily-check"

# Run a trigger missed by up to this many seconds (e.g. after a suspend)
MISFIRE_GRACE_SECONDS = 15 * 60


class DailyScheduler:
    """Runs a CheckCycle once a day at hour:minute in the configured zone."""

    def __init__(
        self,
        cycle: CheckCycle,
        hour: int,
        minute: int = 0,
        timezone: TimezoneService | None = None,
    ):
        if not 0 <= hour <= 23:
            raise ValueError(f"hour must be 0-23, got {hour}")
        if not 0 <= minute <= 59:
            raise ValueError(f"minute must be 0-59, got {minute}")

        self.cycle = cycle
        self.hour = hour
        self.minute = minute
        self.timezone = timezone or get_timezone_service()
        self._scheduler: AsyncIOScheduler | None = None
        self._running = False
        self._stopped: asyncio.Event | None = None
        self._fatal: BaseException | None = None
        self.last_report: CycleReport | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def next_run_time(self) -> datetime | None:
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def trigger(self) -> CronTrigger:
        return CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone.tzinfo)

    def start(self) -> None:
        """Arm the scheduler. Must be called from inside a running event loop."""
        if self.is_running:
            logger.warning("Scheduler already running")
            return

        self._stopped = asyncio.Event()
        self._scheduler = AsyncIOScheduler(timezone=self.timezone.tzinfo)
        self._scheduler.add_job(
            self.run_once,
            self.trigger(),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        self._scheduler.start()
        self._running = True
        logger.info(
            f"Daily check scheduled at {self.hour:02d}:{self.minute:02d} "
            f"{self.timezone.name} (next run: {self.next_run_time})"
        )

    def shutdown(self) -> None:
        """Stop the scheduler. Safe to call more than once."""
        # APScheduler 3.11 defers shutdown to the event loop, so track state here
        if self._running:
            self._running = False
            assert self._scheduler is not None
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        if self._stopped is not None:
            self._stopped.set()

    async def run_once(self) -> CycleReport | None:
        """Run one cycle, applying the per-trigger failure policy."""
        try:
            report = await self.cycle.run()
        except FetchError as e:
            logger.warning(f"Skipping check cycle, could not fetch tasks: {e}")
            return None
        except AuthError as e:
            logger.error(f"Google authorization failed, stopping: {e}")
            self._fatal = e
            self.shutdown()
            return None
        except Exception as e:
            logger.exception(f"Check cycle failed: {e}")
            return None

        if report is not None:
            self.last_report = report
        return report

    async def run_forever(self) -> None:
        """Arm the scheduler and wait until shutdown.

        Raises:
            AuthError: if a scheduled cycle lost Google authorization
        """
        self.start()
        assert self._stopped is not None
        try:
            await self._stopped.wait()
        finally:
            self.shutdown()

        if self._fatal is not None:
            raise self._fatal
