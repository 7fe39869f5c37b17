"""Embedding and vector search."""
