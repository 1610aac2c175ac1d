"""Application layer: use case orchestration over the database and extraction boundaries."""
