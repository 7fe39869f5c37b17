"""
Log Embedder

Backfills the embedding vector on log records that do not have one yet,
so they become eligible for semantic search.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..retrieval.embeddings import EmbeddingService
from ...exceptions import EmbeddingError
from ...models import EMBEDDING_FIELD, get_path
from ...services.database import DatabaseService

logger = logging.getLogger(__name__)

# Order matters: it is the order the parts appear in the embedded text
TEXT_PARTS = (
    ("DeviceId: {}", "DeviceId"),
    ("Org: {}", "OrganizationId"),
    ("{}", "Timestamp"),
    ("{}", "LogSummary"),
    ("{}", "LogData.Description"),
    ("{}", "LogData.Model"),
    ("{}", "LogData.State"),
    ("{}", "LogData.TagDetail.Message"),
    ("{}", "LogData.TagDetail.AlertCode"),
    ("{}", "LogLevel"),
    ("{}", "LogData.DeviceType"),
    ("{}", "LogData.Ward"),
    ("{}", "LogData.LoggedEvent"),
    ("{}", "LogData.Tag"),
)


def extract_text(record: Mapping[str, Any]) -> str:
    """
    Render one log record as the text that gets embedded.

    Parts with empty values are left out; the rest are joined with " | ".
    """
    parts = []
    for template, field_path in TEXT_PARTS:
        value = get_path(record, field_path)
        if value:
            parts.append(template.format(value))
    return " | ".join(parts)


@dataclass
class EmbeddingRunSummary:
    """Counts from one backfill run."""
    embedded: int = 0
    skipped: int = 0
    failed: int = 0


class LogEmbedder:
    """
    Generates embeddings for log records missing one.

    A record that fails to embed is logged and left without a vector;
    the run continues with the next record.
    """

    def __init__(
        self,
        db: Optional[DatabaseService] = None,
        embedding_service: Optional[EmbeddingService] = None
    ):
        """Initialize embedder with database and embedding service."""
        logger.info("Initializing LogEmbedder")
        self.db = db or DatabaseService()
        self.embedding_service = embedding_service or EmbeddingService()
        logger.info("LogEmbedder ready")

    def embed_pending(self, limit: int = 0) -> EmbeddingRunSummary:
        """
        Embed every record that has no embedding yet.

        Args:
            limit: Stop after this many records (0 = no limit)

        Returns:
            EmbeddingRunSummary with embedded/skipped/failed counts
        """
        summary = EmbeddingRunSummary()

        with self.db.collection() as collection:
            cursor = collection.find({EMBEDDING_FIELD: {"$exists": False}})
            if limit:
                cursor = cursor.limit(limit)

            for record in cursor:
                text = extract_text(record)
                if not text.strip():
                    logger.warning(f"Skipping empty record: {record.get('_id')}")
                    summary.skipped += 1
                    continue

                try:
                    embedding = self.embedding_service.embed_document(text)
                except EmbeddingError as e:
                    logger.error(f"Error embedding record {record.get('_id')}: {e}")
                    summary.failed += 1
                    continue

                collection.update_one(
                    {"_id": record["_id"]},
                    {"$set": {EMBEDDING_FIELD: embedding}}
                )
                logger.debug(f"Embedded and updated: {record.get('_id')}")
                summary.embedded += 1

        logger.info(
            f"SUCCESS: Embedded {summary.embedded} records "
            f"({summary.skipped} skipped, {summary.failed} failed)"
        )
        return summary
