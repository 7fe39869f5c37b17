"""Routing, parsing, context assembly and generation."""
