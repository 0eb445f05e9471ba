"""
Staged notification scheduler.

Arming a complaint pushes three jobs (confirmation, acknowledgement,
resolution) onto a timer queue. A single worker task pops due jobs and
persists them one at a time, so a complaint's stages are always written
in stage order. A failed stage is logged and the later ones still run.

Armed stages cannot be cancelled, and jobs still queued at shutdown are
dropped (delivery is best-effort).
"""

import asyncio
import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union
from uuid import UUID

from nagrik.core.config import settings
from nagrik.models.complaint import IssueType
from nagrik.models.notification import NotificationStage, STAGE_ORDER
from nagrik.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledStage:
    """One queued notification; ordered by (fire_at, arm_seq, stage_rank)"""
    fire_at: float
    arm_seq: int
    stage_rank: int
    complaint_id: UUID = field(compare=False)
    complaint_code: str = field(compare=False)
    issue_type: str = field(compare=False)
    stage: NotificationStage = field(compare=False)


class NotificationScheduler:
    """Timer queue plus worker loop for complaint lifecycle notifications"""

    def __init__(
        self,
        notification_service: NotificationService,
        acknowledgement_delay: Optional[float] = None,
        resolution_delay: Optional[float] = None,
        poll_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._service = notification_service
        self.acknowledgement_delay = (
            settings.NOTIFICATION_ACKNOWLEDGEMENT_DELAY_SECONDS
            if acknowledgement_delay is None else acknowledgement_delay
        )
        self.resolution_delay = (
            settings.NOTIFICATION_RESOLUTION_DELAY_SECONDS
            if resolution_delay is None else resolution_delay
        )
        self.poll_seconds = poll_seconds or settings.NOTIFICATION_POLL_SECONDS
        self._clock = clock

        self._queue: List[ScheduledStage] = []
        self._arm_seq = itertools.count()
        self._drain_lock = asyncio.Lock()
        self._wakeup = asyncio.Event()
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def arm(
        self,
        complaint_id: UUID,
        complaint_code: str,
        issue_type: Union[IssueType, str],
    ) -> List[ScheduledStage]:
        """Queue the three lifecycle stages for a complaint. Never blocks."""
        issue = issue_type.value if isinstance(issue_type, IssueType) else str(issue_type)
        now = self._clock()
        seq = next(self._arm_seq)
        delays = (0.0, self.acknowledgement_delay, self.resolution_delay)

        jobs = []
        fire_at = now
        for rank, (stage, delay) in enumerate(zip(STAGE_ORDER, delays), start=1):
            # Never earlier than the previous stage, whatever the configured delays
            fire_at = max(fire_at, now + delay)
            job = ScheduledStage(
                fire_at=fire_at,
                arm_seq=seq,
                stage_rank=rank,
                complaint_id=complaint_id,
                complaint_code=complaint_code,
                issue_type=issue,
                stage=stage,
            )
            heapq.heappush(self._queue, job)
            jobs.append(job)

        self._wakeup.set()
        logger.info("Armed lifecycle notifications for complaint %s", complaint_code)
        return jobs

    async def run_pending(self) -> int:
        """Emit every stage that is due now, in queue order. Returns the number processed."""
        processed = 0
        async with self._drain_lock:
            while self._queue and self._queue[0].fire_at <= self._clock():
                job = heapq.heappop(self._queue)
                await self._emit(job)
                processed += 1
        return processed

    async def _emit(self, job: ScheduledStage) -> None:
        try:
            notification = await self._service.notify_stage(
                job.complaint_id, job.complaint_code, job.issue_type, job.stage
            )
        except Exception:
            logger.exception("Failed to persist %s notification for complaint %s",
                             job.stage.value, job.complaint_code)
            return

        if notification is None:
            logger.info("Skipped duplicate %s notification for complaint %s",
                        job.stage.value, job.complaint_code)
        else:
            logger.debug("Emitted %s notification for complaint %s",
                         job.stage.value, job.complaint_code)

    def _next_wait(self) -> float:
        if not self._queue:
            return self.poll_seconds
        return max(0.0, min(self.poll_seconds, self._queue[0].fire_at - self._clock()))

    async def start(self) -> None:
        """Start the worker loop. Calling start twice is a no-op."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Notification scheduler started")

    async def stop(self) -> None:
        """Stop the worker loop. Stages still queued are dropped."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._queue:
            logger.warning("Notification scheduler stopped with %d stage(s) undelivered", len(self._queue))
        logger.info("Notification scheduler stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.run_pending()
                self._wakeup.clear()
                try:
                    await asyncio.wait_for(self._wakeup.wait(), timeout=self._next_wait())
                except asyncio.TimeoutError:
                    pass
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Notification worker cycle failed")
                await asyncio.sleep(self.poll_seconds)
