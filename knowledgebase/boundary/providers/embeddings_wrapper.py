"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

The base GoogleGenerativeAIEmbeddings class ignores output_dimensionality in
the constructor, so every embed call is forced to the configured dimension.
Vector collections are created with that dimension.

Dependencies: langchain_google_genai
System role: Embedding dimension consistency for the vector index
"""

import logging
from typing import Any, List

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings that always requests the same dimension."""

    _output_dimensionality: int = 1024

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1024,
        **kwargs: Any,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Dimension of every returned vector
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(self, texts: List[str], **kwargs: Any) -> List[List[float]]:
        kwargs.setdefault("task_type", "RETRIEVAL_DOCUMENT")
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_documents(texts, **kwargs)

    def embed_query(self, text: str, **kwargs: Any) -> List[float]:
        kwargs.setdefault("task_type", "RETRIEVAL_QUERY")
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_query(text, **kwargs)
