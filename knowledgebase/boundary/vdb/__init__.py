"""
Vector index boundary.

Exports the VectorIndex interface, its S3 Vectors and FAISS backends,
and the configuration-driven factory.
"""

from knowledgebase.boundary.vdb.faiss_index import FaissVectorIndex
from knowledgebase.boundary.vdb.s3_vectors_index import S3VectorsIndex
from knowledgebase.boundary.vdb.vector_index import VectorIndex, collection_name_for
from knowledgebase.boundary.vdb.vector_index_factory import get_vector_index
from knowledgebase.boundary.vdb.vector_schemas import VectorHit, VectorPoint

__all__ = [
    "FaissVectorIndex",
    "S3VectorsIndex",
    "VectorHit",
    "VectorIndex",
    "VectorPoint",
    "collection_name_for",
    "get_vector_index",
]
