"""
Document ingestion pipeline.

Import the orchestrator from knowledgebase.core.document_processing.entrypoint;
this package init stays import-light because boundary modules depend on its
models.
"""
