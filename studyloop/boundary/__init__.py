"""Boundary adapters: relational storage and Redis caches."""
