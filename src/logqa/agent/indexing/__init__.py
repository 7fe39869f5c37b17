"""Embedding backfill for stored log records."""
