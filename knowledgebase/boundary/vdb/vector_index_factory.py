"""
Vector index factory.

Returns the appropriate vector index based on configuration.
Use FAISS for local development, S3 Vectors for production.

Dependencies: knowledgebase.configs, knowledgebase.boundary.vdb
System role: Vector index instantiation
"""

import logging

from knowledgebase.boundary.vdb.faiss_index import FaissVectorIndex
from knowledgebase.boundary.vdb.s3_vectors_index import S3VectorsIndex
from knowledgebase.boundary.vdb.vector_index import VectorIndex
from knowledgebase.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_index(settings: VectorStoreSettings) -> VectorIndex:
    """
    Get vector index based on configuration.

    Args:
        settings: Vector store settings

    Returns:
        VectorIndex: FaissVectorIndex or S3VectorsIndex
    """
    if settings.store_type == "faiss":
        logger.info(f"{__name__}:get_vector_index - Using FAISS ({settings.faiss_index_dir})")
        return FaissVectorIndex(
            index_dir=settings.faiss_index_dir,
            collection_prefix=settings.collection_prefix,
            distance_metric=settings.distance_metric,
        )

    logger.info(f"{__name__}:get_vector_index - Using S3 Vectors ({settings.vectors_bucket})")
    return S3VectorsIndex(
        vectors_bucket=settings.vectors_bucket,
        region=settings.aws_region,
        collection_prefix=settings.collection_prefix,
        distance_metric=settings.distance_metric,
    )
