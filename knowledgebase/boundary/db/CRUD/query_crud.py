"""
Query record CRUD operations.

Dependencies: sqlalchemy, knowledgebase.boundary.db.models.query_model
System role: Retrieval analytics persistence
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledgebase.boundary.db.CRUD.base_crud import BaseCRUD
from knowledgebase.boundary.db.models.query_model import QueryModel


class QueryCRUD(BaseCRUD[QueryModel]):
    """Insert-only access to query records."""

    def __init__(self) -> None:
        """Initialize QueryCRUD with QueryModel."""
        super().__init__(QueryModel)

    async def get_by_workspace_id(
        self,
        session: AsyncSession,
        workspace_id: str,
        limit: int | None = None,
    ) -> Sequence[QueryModel]:
        """
        Retrieve query records of a workspace, newest first.

        Args:
            session: Async database session
            workspace_id: Workspace searched
            limit: Maximum number of records to return

        Returns:
            Sequence of QueryModels
        """
        stmt = (
            select(QueryModel)
            .where(QueryModel.workspace_id == workspace_id)
            .order_by(QueryModel.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


query_crud = QueryCRUD()
