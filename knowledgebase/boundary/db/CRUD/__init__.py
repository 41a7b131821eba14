"""CRUD operation classes and singletons."""

from knowledgebase.boundary.db.CRUD.base_crud import BaseCRUD
from knowledgebase.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from knowledgebase.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from knowledgebase.boundary.db.CRUD.query_crud import QueryCRUD, query_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "DocumentCRUD",
    "QueryCRUD",
    "chunk_crud",
    "document_crud",
    "query_crud",
]
