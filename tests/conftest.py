"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, document factory, fake embeddings,
in-memory FAISS index, wired ingestion pipeline
Dependencies: pytest, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import uuid
from typing import Any, Awaitable, Callable

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from knowledgebase.boundary.db.base import Base
from knowledgebase.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    DocumentType,
    IngestionStatus,
)
from knowledgebase.boundary.providers.embedding_client import EmbeddingClient
from knowledgebase.boundary.vdb.faiss_index import FaissVectorIndex

EMBEDDING_DIMENSION = 8
WORKSPACE_ID = "workspace-1"


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """
    Single session on the in-memory database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_document(session_factory) -> Callable[..., Awaitable[DocumentModel]]:
    """
    Factory inserting a committed DocumentModel.

    Returns:
        Coroutine function accepting DocumentModel column overrides
    """

    async def _make(**overrides: Any) -> DocumentModel:
        values: dict[str, Any] = {
            "workspace_id": WORKSPACE_ID,
            "name": "handbook.txt",
            "document_type": DocumentType.TXT,
            "storage_key": f"workspaces/{WORKSPACE_ID}/{uuid.uuid4()}.txt",
            "storage_bucket": "test-bucket",
            "storage_region": "us-east-1",
            "status": DocumentStatus.UPLOADED,
            "ingestion_status": IngestionStatus.PENDING,
        }
        values.update(overrides)
        async with session_factory() as session:
            document = DocumentModel(**values)
            session.add(document)
            await session.commit()
            await session.refresh(document)
        return document

    return _make


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Deterministic langchain fake embeddings (same text -> same vector)."""
    return DeterministicFakeEmbedding(size=EMBEDDING_DIMENSION)


@pytest.fixture
def embedding_client(fake_embeddings) -> EmbeddingClient:
    """Embedding client over fake embeddings, no rate limit."""
    return EmbeddingClient(
        fake_embeddings,
        model_name="fake-embedding",
        dimension=EMBEDDING_DIMENSION,
        batch_size=4,
    )


@pytest.fixture
def vector_index() -> FaissVectorIndex:
    """FAISS index kept in memory."""
    return FaissVectorIndex(index_dir=None)
