"""
Ingestion worker pool.

Runs N asyncio loops that lease jobs from the task queue and feed them to
the ingestion pipeline. A job failure never stops a loop: non-retryable
errors are dead-lettered at once, everything else goes through the queue's
retry-with-backoff policy.

Run with: python -m knowledgebase.workers.ingestion_worker

Dependencies: knowledgebase.boundary.queue, knowledgebase.core.document_processing
System role: Background ingestion processing
"""

import asyncio
import logging
import signal

from dotenv import load_dotenv

from knowledgebase.boundary.queue.task_queue import LeasedTask, TaskQueue
from knowledgebase.core.document_processing.entrypoint import IngestionPipeline
from knowledgebase.core.document_processing.models import PipelineResult
from knowledgebase.core.exceptions import KnowledgeBaseError
from knowledgebase.observability.correlation import clear_correlation_id, set_correlation_id
from knowledgebase.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IngestionWorkerPool:
    """Bounded pool of ingestion loops sharing one queue."""

    def __init__(
        self,
        queue: TaskQueue,
        pipeline: IngestionPipeline,
        concurrency: int = 2,
        lease_seconds: float = 900.0,
        poll_interval: float = 1.0,
    ) -> None:
        """
        Initialize worker pool.

        Args:
            queue: Job source
            pipeline: Ingestion pipeline shared by all loops
            concurrency: Number of parallel loops
            lease_seconds: Lease taken on each dequeued job
            poll_interval: Sleep between empty polls
        """
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self._queue = queue
        self._pipeline = pipeline
        self._concurrency = concurrency
        self._lease_seconds = lease_seconds
        self._poll_interval = poll_interval
        self._stopping = asyncio.Event()
        self._workers: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not worker.done() for worker in self._workers)

    def start(self) -> None:
        """Start the worker loops on the running event loop."""
        if self.running:
            return
        self._stopping.clear()
        self._workers = [
            asyncio.create_task(self._loop(index), name=f"ingestion-worker-{index}")
            for index in range(self._concurrency)
        ]
        logger.info(f"{__name__}:start - Started {self._concurrency} ingestion workers")

    async def stop(self) -> None:
        """Let in-flight jobs finish, then end every loop."""
        self._stopping.set()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info(f"{__name__}:stop - Ingestion workers stopped")

    async def run(self) -> None:
        """Start and block until stop() is called."""
        self.start()
        await self._stopping.wait()
        await self.stop()

    async def _loop(self, index: int) -> None:
        while not self._stopping.is_set():
            try:
                task = await self._queue.dequeue(self._lease_seconds)
            except Exception as e:
                logger.error(
                    f"{__name__}:_loop - Worker {index} dequeue failed: {type(e).__name__}: {e}"
                )
                task = None
            if task is None:
                await self._sleep()
                continue
            await self.process(task)

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=self._poll_interval)
        except asyncio.TimeoutError:
            pass

    async def process(self, task: LeasedTask) -> None:
        """
        Run one leased job and settle it with the queue.

        Args:
            task: Leased job
        """
        set_correlation_id(task.job.job_id)
        try:
            result = await self._ingest_leased(task)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:process - Job failed",
                e,
                document_id=task.job.job_id,
                attempt=task.attempt,
            )
            await self._settle_failure(task, e)
        else:
            await self._queue.ack(task)
            logger.info(
                f"{__name__}:process - Job done",
                extra={
                    "document_id": task.job.job_id,
                    "chunk_count": result.chunk_count,
                    "skipped": result.skipped,
                },
            )
        finally:
            clear_correlation_id()

    async def _ingest_leased(self, task: LeasedTask) -> PipelineResult:
        heartbeat = asyncio.create_task(self._keep_leased(task))
        try:
            return await self._pipeline.ingest(task.job)
        finally:
            heartbeat.cancel()

    async def _keep_leased(self, task: LeasedTask) -> None:
        # renew at a third of the lease so one missed beat still leaves margin
        interval = self._lease_seconds / 3
        while True:
            await asyncio.sleep(interval)
            try:
                if not await self._queue.extend_lease(task, self._lease_seconds):
                    logger.warning(
                        f"{__name__}:_keep_leased - Lease lost, job may run twice",
                        extra={"document_id": task.job.job_id},
                    )
                    return
            except Exception as e:
                logger.warning(
                    f"{__name__}:_keep_leased - Lease renewal failed: {type(e).__name__}: {e}",
                    extra={"document_id": task.job.job_id},
                )

    async def _settle_failure(self, task: LeasedTask, error: Exception) -> None:
        message = f"{type(error).__name__}: {error}"
        try:
            if isinstance(error, KnowledgeBaseError) and not error.retryable:
                await self._queue.dead_letter(task, message)
                return
            will_retry = await self._queue.retry(task, message)
            if not will_retry:
                logger.warning(
                    f"{__name__}:_settle_failure - Attempts exhausted, job dead-lettered",
                    extra={"document_id": task.job.job_id, "attempt": task.attempt},
                )
        except Exception as e:
            logger.error(
                f"{__name__}:_settle_failure - Could not settle job: {type(e).__name__}: {e}",
                extra={"document_id": task.job.job_id},
            )


async def _serve() -> None:
    from knowledgebase.dependencies import get_container

    container = get_container()
    await container.startup()
    pool = container.worker_pool

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    pool.start()
    try:
        await stop.wait()
    finally:
        await pool.stop()
        await container.shutdown()


def main() -> None:
    """Console entry point."""
    load_dotenv()
    from knowledgebase.configs import get_settings
    from knowledgebase.observability.logger import configure_logging

    configure_logging(get_settings().log_level)
    asyncio.run(_serve())


if __name__ == "__main__":
    main()
