"""
Background writer for query records.

Recording is fire-and-forget: a failed insert is logged and never reaches
the search or answer response.

Dependencies: sqlalchemy, knowledgebase.boundary.db
System role: Retrieval analytics
"""

import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledgebase.boundary.db.CRUD.query_crud import query_crud

logger = logging.getLogger(__name__)


class QueryRecorder:
    """Schedule QueryModel inserts as background tasks."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._tasks: set[asyncio.Task] = set()

    def record(self, **fields: Any) -> asyncio.Task:
        """
        Schedule one query record insert.

        Args:
            **fields: QueryModel columns

        Returns:
            asyncio.Task: The background insert
        """
        task = asyncio.create_task(self._write(fields))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _write(self, fields: dict[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                await query_crud.create(session, **fields)
                await session.commit()
        except Exception as e:
            logger.warning(
                f"{__name__}:_write - Failed to record query: {type(e).__name__}: {e}",
                extra={"workspace_id": fields.get("workspace_id")},
            )

    async def drain(self) -> None:
        """Wait for every pending insert (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
