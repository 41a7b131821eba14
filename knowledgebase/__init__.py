"""Document ingestion and hybrid retrieval knowledge base."""
