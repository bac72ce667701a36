from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..common.datetime_utils import now_utc
from ..core.constants import FINALIZATION_JOB_ID, SCHEDULER_MISFIRE_GRACE_SECONDS, SEEDING_JOB_ID
from ..core.exceptions import JobAlreadyRunningError
from ..shifts.model import ShiftSettings
from .absence_seeding import AbsenceSeedingJob, SeedingResult
from .finalization import FinalizationJob, FinalizationResult

logger = logging.getLogger(__name__)


class ShiftScheduler:
    """Runs absence seeding at window open and finalization after window close.

    Both jobs fire on wall-clock time in the shift timezone. A run of a job
    never overlaps another run of the same job, whether it was started by
    the scheduler or by an administrator.
    """

    def __init__(
        self,
        settings: ShiftSettings,
        seeding: AbsenceSeedingJob,
        finalization: FinalizationJob,
        *,
        clock: Callable[[], datetime] = now_utc,
        log: Optional[logging.Logger] = None,
    ):
        self._settings = settings
        self._seeding = seeding
        self._finalization = finalization
        self._clock = clock
        self._log = log or logger
        self._locks = {SEEDING_JOB_ID: threading.Lock(), FINALIZATION_JOB_ID: threading.Lock()}
        self._triggers = {
            SEEDING_JOB_ID: self._cron_at(settings.window_start),
            FINALIZATION_JOB_ID: self._cron_at(settings.finalization_trigger),
        }
        self._scheduler: Optional[BackgroundScheduler] = None

    def _cron_at(self, at) -> CronTrigger:
        return CronTrigger(hour=at.hour, minute=at.minute, second=at.second, timezone=self._settings.tz)

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = BackgroundScheduler(timezone=self._settings.tz)
        job_defaults = {
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": SCHEDULER_MISFIRE_GRACE_SECONDS,
            "replace_existing": True,
        }
        scheduler.add_job(
            self._scheduled, self._triggers[SEEDING_JOB_ID],
            args=[SEEDING_JOB_ID], id=SEEDING_JOB_ID, **job_defaults,
        )
        scheduler.add_job(
            self._scheduled, self._triggers[FINALIZATION_JOB_ID],
            args=[FINALIZATION_JOB_ID], id=FINALIZATION_JOB_ID, **job_defaults,
        )
        scheduler.start()
        self._scheduler = scheduler
        self._log.info("Scheduler started: %s", {k: v.isoformat() for k, v in self.next_fire_times().items()})

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            self._log.info("Scheduler stopped")
        self._scheduler = None

    def next_fire_times(self, now: Optional[datetime] = None) -> dict[str, datetime]:
        now = (now or self._clock()).astimezone(self._settings.tz)
        return {job_id: trigger.get_next_fire_time(None, now) for job_id, trigger in self._triggers.items()}

    # -- manual triggers -------------------------------------------------

    def run_seeding(self, trigger_instant: Optional[datetime] = None) -> SeedingResult:
        return self._run_exclusive(SEEDING_JOB_ID, lambda: self._seeding.run(trigger_instant))

    def run_finalization(self, trigger_instant: Optional[datetime] = None) -> FinalizationResult:
        return self._run_exclusive(FINALIZATION_JOB_ID, lambda: self._finalization.run(trigger_instant))

    def _run_exclusive(self, job_id: str, fn):
        lock = self._locks[job_id]
        if not lock.acquire(blocking=False):
            raise JobAlreadyRunningError(f"Job '{job_id}' is already running")
        try:
            return fn()
        finally:
            lock.release()

    # -- scheduled entry point -------------------------------------------

    def _scheduled(self, job_id: str) -> None:
        runner = self.run_seeding if job_id == SEEDING_JOB_ID else self.run_finalization
        try:
            result = runner()
        except JobAlreadyRunningError:
            self._log.warning("Skipping scheduled %s: previous run still in progress", job_id)
            return
        except Exception:
            # Keep the scheduler alive; the next fire retries.
            self._log.exception("Scheduled %s failed", job_id)
            return
        self._log.info("Scheduled %s finished: %s", job_id, result.to_dict())
