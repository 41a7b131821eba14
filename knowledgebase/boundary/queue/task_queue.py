"""
Task queue interface for ingestion jobs.

Delivery semantics: enqueue de-duplicates on the job identity (the document
id), dequeue hands out a time-limited lease, ack completes, retry schedules
the next attempt with exponential backoff or dead-letters once attempts are
exhausted.

Dependencies: pydantic, knowledgebase.core.document_processing.models
System role: Job delivery abstraction between the upload flow and workers
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from knowledgebase.core.document_processing.models import IngestionJob


class LeasedTask(BaseModel):
    """
    A job handed to one worker for the duration of a lease.

    Attributes:
        job: The ingestion job
        attempt: 1-based delivery attempt
        receipt: Lease token required by ack/retry/dead_letter
    """

    model_config = ConfigDict(frozen=True)

    job: IngestionJob
    attempt: int
    receipt: str


def backoff_delay(attempt: int, base_seconds: float) -> float:
    """Exponential backoff before the attempt following `attempt`."""
    return base_seconds * (2 ** (attempt - 1))


class TaskQueue(ABC):
    """Abstract ingestion job queue."""

    def __init__(self, max_attempts: int = 3, backoff_base_seconds: float = 2.0) -> None:
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds

    @abstractmethod
    async def enqueue(self, job: IngestionJob) -> bool:
        """
        Submit a job.

        Returns:
            bool: False when a job with the same identity is already pending
        """

    @abstractmethod
    async def dequeue(self, lease_seconds: float) -> LeasedTask | None:
        """Lease the next ready job, or None when nothing is ready."""

    @abstractmethod
    async def ack(self, task: LeasedTask) -> None:
        """Mark a leased job completed."""

    @abstractmethod
    async def retry(self, task: LeasedTask, error: str) -> bool:
        """
        Schedule another attempt after backoff.

        Returns:
            bool: True if rescheduled, False if attempts ran out and the job
            was dead-lettered
        """

    @abstractmethod
    async def extend_lease(self, task: LeasedTask, lease_seconds: float) -> bool:
        """
        Renew the lease of a job that is still running.

        Returns:
            bool: False when the lease was already lost
        """

    @abstractmethod
    async def dead_letter(self, task: LeasedTask, error: str) -> None:
        """Give up on a job permanently."""
