"""
SQS FIFO task queue.

Production TaskQueue on Amazon SQS. The message group is the document id,
so work on one document is serialised. Every enqueue carries a fresh
deduplication id: SQS would otherwise drop a manual re-queue sent within
five minutes of an earlier send for the same document. The adapter cannot
see what is pending, so enqueue never reports a duplicate; a second copy is
harmless because pipeline status writes are compare-and-set. The receive
count is the attempt number, retries reuse the message by extending its
visibility timeout, and dead-lettering is an explicit copy to the DLQ.

Dependencies: boto3, botocore
System role: Production job queue backend
"""

import asyncio
import logging
import uuid
from typing import Any

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

from knowledgebase.boundary.queue.task_queue import LeasedTask, TaskQueue, backoff_delay
from knowledgebase.core.document_processing.models import IngestionJob

logger = logging.getLogger(__name__)

MAX_VISIBILITY_SECONDS = 12 * 3600


class SQSTaskQueue(TaskQueue):
    """TaskQueue backed by an SQS FIFO queue."""

    def __init__(
        self,
        queue_url: str,
        dead_letter_queue_url: str = "",
        region: str = "us-east-1",
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        wait_seconds: int = 10,
        client: Any = None,
    ) -> None:
        """
        Initialize SQS queue adapter.

        Args:
            queue_url: FIFO queue URL
            dead_letter_queue_url: FIFO dead-letter queue URL ('' drops dead jobs)
            region: AWS region
            max_attempts: Delivery attempts per job
            backoff_base_seconds: Base delay of the exponential backoff
            wait_seconds: Long-poll duration of receive_message
            client: Preconfigured boto3 SQS client (tests)
        """
        super().__init__(max_attempts, backoff_base_seconds)
        if not queue_url:
            raise ValueError("queue_url is required for the SQS task queue")
        self._queue_url = queue_url
        self._dlq_url = dead_letter_queue_url
        self._wait_seconds = wait_seconds
        self._client = client or boto3.client("sqs", region_name=region)

    async def enqueue(self, job: IngestionJob) -> bool:
        """Send the job. Always True, SQS gives no view of pending messages."""
        await asyncio.to_thread(
            self._client.send_message,
            QueueUrl=self._queue_url,
            MessageBody=job.to_message(),
            MessageGroupId=job.job_id,
            MessageDeduplicationId=f"{job.job_id}:{uuid.uuid4().hex}",
        )
        logger.info(f"{__name__}:enqueue - Sent job {job.job_id}")
        return True

    async def dequeue(self, lease_seconds: float) -> LeasedTask | None:
        response = await asyncio.to_thread(
            self._client.receive_message,
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=1,
            VisibilityTimeout=int(lease_seconds),
            WaitTimeSeconds=self._wait_seconds,
            AttributeNames=["ApproximateReceiveCount"],
        )
        messages = response.get("Messages", [])
        if not messages:
            return None

        message = messages[0]
        receipt = message["ReceiptHandle"]
        try:
            job = IngestionJob.model_validate_json(message["Body"])
        except ValidationError as e:
            logger.error(f"{__name__}:dequeue - Malformed job message: {e}")
            await self._move_to_dead_letter(message["Body"], receipt, "malformed", str(e))
            return None

        attempt = int(message.get("Attributes", {}).get("ApproximateReceiveCount", "1"))
        return LeasedTask(job=job, attempt=attempt, receipt=receipt)

    async def ack(self, task: LeasedTask) -> None:
        await self._delete(task.receipt)

    async def retry(self, task: LeasedTask, error: str) -> bool:
        if task.attempt >= self.max_attempts:
            await self.dead_letter(task, error)
            return False
        delay = min(int(backoff_delay(task.attempt, self.backoff_base_seconds)), MAX_VISIBILITY_SECONDS)
        try:
            await asyncio.to_thread(
                self._client.change_message_visibility,
                QueueUrl=self._queue_url,
                ReceiptHandle=task.receipt,
                VisibilityTimeout=delay,
            )
        except ClientError as e:
            # lease already expired; SQS redelivers on its own
            logger.warning(f"{__name__}:retry - Could not reschedule {task.job.job_id}: {e}")
        return True

    async def extend_lease(self, task: LeasedTask, lease_seconds: float) -> bool:
        try:
            await asyncio.to_thread(
                self._client.change_message_visibility,
                QueueUrl=self._queue_url,
                ReceiptHandle=task.receipt,
                VisibilityTimeout=min(int(lease_seconds), MAX_VISIBILITY_SECONDS),
            )
        except ClientError as e:
            logger.warning(f"{__name__}:extend_lease - Lease lost for {task.job.job_id}: {e}")
            return False
        return True

    async def dead_letter(self, task: LeasedTask, error: str) -> None:
        await self._move_to_dead_letter(task.job.to_message(), task.receipt, task.job.job_id, error)
        logger.error(f"{__name__}:dead_letter - Job dead-lettered after {task.attempt} attempt(s)",
                     extra={"job_id": task.job.job_id})

    async def _move_to_dead_letter(self, body: str, receipt: str, group_id: str, error: str) -> None:
        if self._dlq_url:
            await asyncio.to_thread(
                self._client.send_message,
                QueueUrl=self._dlq_url,
                MessageBody=body,
                MessageGroupId=group_id,
                MessageDeduplicationId=receipt[:128],
                MessageAttributes={
                    "error": {"DataType": "String", "StringValue": error[:1024] or "unknown"},
                },
            )
        await self._delete(receipt)

    async def _delete(self, receipt: str) -> None:
        await asyncio.to_thread(
            self._client.delete_message,
            QueueUrl=self._queue_url,
            ReceiptHandle=receipt,
        )
