"""Persistence service: one JSON document behind a small FastAPI app."""
