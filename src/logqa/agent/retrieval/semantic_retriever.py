"""
Semantic Retriever

Embeds a free-text question and runs a filtered vector search over
the stored log embeddings.

An embedding failure aborts the search with EmbeddingError; there is no
fallback to an empty context. An empty result list is a normal outcome.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .embeddings import EmbeddingService
from .vector_store import VectorStore
from ..core.query_parser import clean_filters
from ...services.protocols import TextEmbedder

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """
    Question -> embedding -> top-K similar log records.

    Ranking and tie-breaking are whatever the storage backend's cosine
    ranking produces. Each record has at most one embedding, so results
    are never deduplicated.
    """

    def __init__(
        self,
        vector_store: Optional[VectorStore] = None,
        embedding_service: Optional[TextEmbedder] = None
    ):
        """
        Initialize semantic retriever.

        Args:
            vector_store: VectorStore instance (created if None)
            embedding_service: Anything with embed_query() (created if None)
        """
        self.vector_store = vector_store or VectorStore()
        self.embedding_service = embedding_service or EmbeddingService()
        logger.info("SemanticRetriever ready")

    def search(
        self,
        question: str,
        metadata_filter: Optional[Mapping[str, Any]] = None
    ) -> List[Tuple[Dict[str, Any], float]]:
        """
        Retrieve the log records most similar to a question.

        Args:
            question: Raw question text, embedded as-is
            metadata_filter: Optional field path -> predicate filter applied
                inside the vector search

        Returns:
            List of (record, score) tuples, best first

        Raises:
            EmbeddingError: If the question could not be embedded
            StorageError: If the vector search failed
        """
        logger.debug(f"Semantic search: '{question[:50]}'")

        query_embedding = self.embedding_service.embed_query(question)

        results = self.vector_store.search(
            query_vector=query_embedding,
            metadata_filter=clean_filters(metadata_filter) or None
        )

        logger.info(f"Semantic search returned {len(results)} records")
        return results
