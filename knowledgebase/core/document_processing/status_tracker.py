"""
Document ingestion status persistence.

Every status change is committed in its own transaction before the next
pipeline stage starts, so an observer polling the document always sees the
furthest stage reached even after a crash. Business status moves alongside:
PARSING -> PROCESSING, COMPLETED -> PROCESSED, FAILED -> FAILED.

Dependencies: sqlalchemy, knowledgebase.boundary.db
System role: Status writer used by the ingestion pipeline
"""

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledgebase.boundary.db.base import utcnow
from knowledgebase.boundary.db.CRUD.document_crud import document_crud
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    IngestionStatus,
)
from knowledgebase.core.exceptions import DocumentNotFoundError, IllegalStateTransitionError
from knowledgebase.observability.log_utils import log_stage_transition

from .state_machine import path_to_parsing, transition

logger = logging.getLogger(__name__)

ERROR_MESSAGE_LIMIT = 2048
INTERRUPTED_MESSAGE = "Interrupted ingestion run"


class IngestionStatusTracker:
    """Persist validated ingestion status transitions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize tracker.

        Args:
            session_factory: Factory for the short per-transition sessions
        """
        self._session_factory = session_factory

    async def load(self, document_id: uuid.UUID) -> DocumentModel:
        """
        Load a live document.

        Raises:
            DocumentNotFoundError: Missing or soft-deleted
        """
        async with self._session_factory() as session:
            document = await document_crud.get_active_by_id(session, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    async def advance(
        self,
        document_id: uuid.UUID,
        current: IngestionStatus,
        target: IngestionStatus,
        **fields: Any,
    ) -> IngestionStatus:
        """
        Validate and commit one transition.

        Args:
            document_id: Document UUID
            current: Status the pipeline last wrote
            target: Next status
            **fields: Columns written in the same transaction

        Returns:
            IngestionStatus: target

        Raises:
            IllegalStateTransitionError: Not in the table, or the stored
                status changed underneath this run
        """
        transition(current, target)
        async with self._session_factory() as session:
            updated = await document_crud.compare_and_set_ingestion_status(
                session, document_id, current, target, **fields
            )
            if not updated:
                await session.rollback()
                raise IllegalStateTransitionError(
                    current.value,
                    target.value,
                    details={"document_id": str(document_id), "reason": "stale status"},
                )
            await session.commit()

        log_stage_transition(logger, document_id, current.value, target.value)
        return target

    async def begin_attempt(self, document: DocumentModel) -> IngestionStatus:
        """
        Move a document into PARSING for a new run.

        Returns:
            IngestionStatus: PARSING
        """
        current = document.ingestion_status
        for target in path_to_parsing(current):
            if target == IngestionStatus.FAILED:
                logger.warning(
                    f"{__name__}:begin_attempt - Found stale {current.value} status, failing it first",
                    extra={"document_id": str(document.id)},
                )
                current = await self.advance(
                    document.id,
                    current,
                    IngestionStatus.FAILED,
                    ingestion_error=INTERRUPTED_MESSAGE,
                    status=DocumentStatus.FAILED,
                )
                continue
            current = await self.advance(
                document.id,
                current,
                target,
                status=DocumentStatus.PROCESSING,
                ingestion_started_at=utcnow(),
                ingestion_completed_at=None,
                ingestion_error=None,
            )
        return current

    async def complete(
        self,
        document_id: uuid.UUID,
        current: IngestionStatus,
        **counters: Any,
    ) -> IngestionStatus:
        """Commit COMPLETED together with the final counters."""
        now = utcnow()
        return await self.advance(
            document_id,
            current,
            IngestionStatus.COMPLETED,
            status=DocumentStatus.PROCESSED,
            ingestion_completed_at=now,
            processed_at=now,
            ingestion_error=None,
            **counters,
        )

    async def fail(
        self,
        document_id: uuid.UUID,
        current: IngestionStatus,
        error_message: str,
    ) -> None:
        """
        Commit FAILED with the error message.

        Never raises: the caller is already handling the original error.
        """
        try:
            await self.advance(
                document_id,
                current,
                IngestionStatus.FAILED,
                status=DocumentStatus.FAILED,
                ingestion_error=error_message[:ERROR_MESSAGE_LIMIT],
            )
        except Exception as e:
            logger.error(
                f"{__name__}:fail - Could not record failure: {type(e).__name__}: {e}",
                extra={"document_id": str(document_id)},
            )
