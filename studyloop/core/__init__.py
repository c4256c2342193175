"""Core domain logic: ingestion, generation, orchestration and idempotency."""
