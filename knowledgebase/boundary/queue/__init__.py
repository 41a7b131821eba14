"""Ingestion job queue boundary."""

from knowledgebase.boundary.queue.memory_queue import InMemoryTaskQueue
from knowledgebase.boundary.queue.sqs_queue import SQSTaskQueue
from knowledgebase.boundary.queue.task_queue import LeasedTask, TaskQueue, backoff_delay

__all__ = ["InMemoryTaskQueue", "LeasedTask", "SQSTaskQueue", "TaskQueue", "backoff_delay"]
