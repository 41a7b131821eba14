"""External system adapters: database, object storage, vector index, queue, model providers."""
