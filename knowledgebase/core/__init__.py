"""Domain core: ingestion pipeline, retrieval engine and exception taxonomy."""
