"""
Error types raised at the storage and AI-service boundaries.

Each error names the subsystem that failed so a turn can report
"database" and "AI service" problems differently.
"""


class LogQAError(Exception):
    """Base class for DeviceLog QA errors."""

    subsystem = "application"


class StorageError(LogQAError):
    """MongoDB was unreachable or rejected a query."""

    subsystem = "database"


class AIServiceError(LogQAError):
    """The embedding or text-generation service failed."""

    subsystem = "AI service"


class EmbeddingError(AIServiceError):
    """No usable vector came back from the embedding service."""


class GenerationError(AIServiceError):
    """The text-generation service failed to produce an answer."""
