"""Query interpretation, retrieval and answer generation."""
