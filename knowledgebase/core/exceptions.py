"""
Exception hierarchy for the knowledge base.

Provides layered exception structure for ingestion and retrieval errors.
All exceptions include context for observability and debugging, and
declare whether the job delivery layer should retry them.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge base errors."""

    retryable: bool = True

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ============================================================================
# Ingestion
# ============================================================================


class DocumentProcessingError(KnowledgeBaseError):
    """Base exception for document ingestion errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class UnsupportedDocumentTypeError(DocumentProcessingError):
    """Raised when the declared document type has no registered extractor."""

    retryable = False

    def __init__(
        self,
        document_type: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["document_type"] = document_type
        self.document_type = document_type
        super().__init__(f"Unsupported document type: {document_type}", document_id, details)


class StorageFetchError(DocumentProcessingError):
    """Raised when the raw object cannot be read from object storage."""

    def __init__(
        self,
        message: str,
        storage_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if storage_key:
            details["storage_key"] = storage_key
        super().__init__(message, details=details)


class ExtractionError(DocumentProcessingError):
    """Raised when text extraction fails, usually a corrupt file."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            document_id: ID of the document
            file_type: Type of file that failed parsing
            details: Additional context
        """
        details = details or {}
        if file_type:
            details["file_type"] = file_type
        super().__init__(message, document_id, details)


class EmbeddingProviderError(KnowledgeBaseError):
    """Raised when an embedding batch fails as a unit."""

    pass


class GenerationProviderError(KnowledgeBaseError):
    """Raised when the answer generation call fails."""

    pass


class VectorIndexError(KnowledgeBaseError):
    """Raised when vector index operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector index error.

        Args:
            message: Error message
            operation: Operation that failed (ensure_collection, upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class IllegalStateTransitionError(KnowledgeBaseError):
    """Raised when an ingestion status change is not in the transition table."""

    retryable = False

    def __init__(self, current: str, target: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"from": current, "to": target})
        self.current = current
        self.target = target
        super().__init__(f"Illegal ingestion transition {current} -> {target}", details)


class DocumentNotFoundError(KnowledgeBaseError):
    """Raised when a document does not exist or has been deleted."""

    retryable = False

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


# ============================================================================
# Retrieval
# ============================================================================


class RetrievalUnavailableError(KnowledgeBaseError):
    """Raised when neither search branch produced a result set."""

    def __init__(
        self,
        message: str,
        workspace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval error.

        Args:
            message: Error message
            workspace_id: Workspace of the failed request
            details: Additional context
        """
        details = details or {}
        if workspace_id:
            details["workspace_id"] = workspace_id
        super().__init__(message, details)
