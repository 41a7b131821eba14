"""
In-process task queue.

Single event loop implementation of TaskQueue for one worker process and
for tests. Expired leases become deliverable again. Finished jobs are kept
for inspection within the retention windows.

Dependencies: asyncio, knowledgebase.boundary.queue.task_queue
System role: Default job queue backend
"""

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from knowledgebase.boundary.queue.task_queue import LeasedTask, TaskQueue, backoff_delay
from knowledgebase.core.document_processing.models import IngestionJob

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    job: IngestionJob
    attempts: int = 0
    ready_at: float = 0.0
    receipt: str | None = None
    leased_until: float | None = None
    last_error: str | None = None
    finished_at: float | None = None
    errors: list[str] = field(default_factory=list)


class InMemoryTaskQueue(TaskQueue):
    """TaskQueue held in process memory."""

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        completed_retention_seconds: float = 24 * 3600,
        completed_retention_count: int = 1000,
        failed_retention_seconds: float = 7 * 24 * 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_attempts, backoff_base_seconds)
        self._active: "OrderedDict[str, _Entry]" = OrderedDict()
        self._completed: "OrderedDict[str, _Entry]" = OrderedDict()
        self._failed: "OrderedDict[str, _Entry]" = OrderedDict()
        self._completed_retention_seconds = completed_retention_seconds
        self._completed_retention_count = completed_retention_count
        self._failed_retention_seconds = failed_retention_seconds
        self._clock = clock

    async def enqueue(self, job: IngestionJob) -> bool:
        if job.job_id in self._active:
            logger.info(f"{__name__}:enqueue - Job already pending: {job.job_id}")
            return False
        self._completed.pop(job.job_id, None)
        self._failed.pop(job.job_id, None)
        self._active[job.job_id] = _Entry(job=job, ready_at=self._clock())
        return True

    async def dequeue(self, lease_seconds: float) -> LeasedTask | None:
        now = self._clock()
        for entry in self._active.values():
            if entry.leased_until is not None:
                if entry.leased_until > now:
                    continue
                logger.warning(f"{__name__}:dequeue - Lease expired: {entry.job.job_id}")
            if entry.ready_at > now:
                continue
            entry.attempts += 1
            entry.receipt = uuid.uuid4().hex
            entry.leased_until = now + lease_seconds
            return LeasedTask(job=entry.job, attempt=entry.attempts, receipt=entry.receipt)
        return None

    def _take(self, task: LeasedTask) -> _Entry | None:
        entry = self._active.get(task.job.job_id)
        if entry is None or entry.receipt != task.receipt:
            logger.warning(f"{__name__}:_take - Stale lease ignored: {task.job.job_id}")
            return None
        return entry

    async def ack(self, task: LeasedTask) -> None:
        entry = self._take(task)
        if entry is None:
            return
        del self._active[task.job.job_id]
        entry.finished_at = self._clock()
        entry.leased_until = None
        self._completed[task.job.job_id] = entry
        self._prune()

    async def retry(self, task: LeasedTask, error: str) -> bool:
        entry = self._take(task)
        if entry is None:
            return False
        if entry.attempts >= self.max_attempts:
            await self.dead_letter(task, error)
            return False
        delay = backoff_delay(entry.attempts, self.backoff_base_seconds)
        entry.last_error = error
        entry.errors.append(error)
        entry.receipt = None
        entry.leased_until = None
        entry.ready_at = self._clock() + delay
        logger.info(
            f"{__name__}:retry - Attempt {entry.attempts} failed, retrying in {delay:.1f}s",
            extra={"job_id": task.job.job_id},
        )
        return True

    async def extend_lease(self, task: LeasedTask, lease_seconds: float) -> bool:
        entry = self._take(task)
        if entry is None:
            return False
        entry.leased_until = self._clock() + lease_seconds
        return True

    async def dead_letter(self, task: LeasedTask, error: str) -> None:
        entry = self._take(task)
        if entry is None:
            return
        del self._active[task.job.job_id]
        entry.last_error = error
        entry.errors.append(error)
        entry.finished_at = self._clock()
        entry.leased_until = None
        self._failed[task.job.job_id] = entry
        logger.error(
            f"{__name__}:dead_letter - Job dead-lettered after {entry.attempts} attempt(s)",
            extra={"job_id": task.job.job_id},
        )
        self._prune()

    def _prune(self) -> None:
        now = self._clock()
        for job_id in [
            key for key, entry in self._completed.items()
            if now - (entry.finished_at or now) > self._completed_retention_seconds
        ]:
            del self._completed[job_id]
        while len(self._completed) > self._completed_retention_count:
            self._completed.popitem(last=False)
        for job_id in [
            key for key, entry in self._failed.items()
            if now - (entry.finished_at or now) > self._failed_retention_seconds
        ]:
            del self._failed[job_id]

    # -------------------------------------------------------------- inspection

    def pending_count(self) -> int:
        """Jobs waiting or leased."""
        return len(self._active)

    def completed_ids(self) -> list[str]:
        return list(self._completed)

    def dead_letter_ids(self) -> list[str]:
        return list(self._failed)

    def last_error(self, job_id: str) -> str | None:
        entry = self._active.get(job_id) or self._failed.get(job_id)
        return entry.last_error if entry else None

    def seconds_until_ready(self, job_id: str) -> float | None:
        entry = self._active.get(job_id)
        if entry is None:
            return None
        return max(0.0, entry.ready_at - self._clock())
