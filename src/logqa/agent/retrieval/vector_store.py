"""
Vector Store

Semantic search over log embeddings stored in MongoDB:
- $vectorSearch with optional pre-filter (one stage, one pass)
- Vector search index creation for the embedding field
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pymongo.operations import SearchIndexModel

from ...config_loader import config
from ...exceptions import EmbeddingError, StorageError
from ...models import EMBEDDING_FIELD
from ...services.database import DatabaseService
from ...services.protocols import LogStore

logger = logging.getLogger(__name__)

SCORE_FIELD = "_score"


class VectorStore:
    """
    MongoDB vector search client for log records.

    Records without an embedding are simply not in the vector index, so
    they never appear in semantic results.
    """

    def __init__(self, db: Optional[LogStore] = None):
        """
        Initialize vector store.

        Args:
            db: LogStore implementation. If None, creates a DatabaseService.
        """
        self.db = db or DatabaseService()

        search_config = config.get_section('vector_search')
        self.index_name = search_config.get('index_name', 'vector_index')
        self.path = search_config.get('path', EMBEDDING_FIELD)
        self.similarity = search_config.get('similarity', 'cosine')
        self.num_candidates = search_config.get('num_candidates', 100)
        self.limit = search_config.get('limit', 15)
        self.filter_paths = search_config.get('filter_paths', [])

        self.embedding_dim = config.get('embeddings.dimension', 768)

        logger.info(
            f"VectorStore initialized: index={self.index_name} path={self.path} "
            f"({self.similarity}, {self.embedding_dim}d)"
        )

    def build_pipeline(
        self,
        query_vector: List[float],
        num_candidates: int,
        top_k: int,
        metadata_filter: Optional[Mapping[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Aggregation pipeline for a filtered vector search.

        The filter lives inside the $vectorSearch stage so candidates are
        filtered and ranked in the same pass.
        """
        vector_stage: Dict[str, Any] = {
            "index": self.index_name,
            "path": self.path,
            "queryVector": query_vector,
            "numCandidates": num_candidates,
            "limit": top_k,
        }
        if metadata_filter:
            vector_stage["filter"] = dict(metadata_filter)

        return [
            {"$vectorSearch": vector_stage},
            {"$set": {SCORE_FIELD: {"$meta": "vectorSearchScore"}}},
            {"$unset": self.path},
        ]

    def search(
        self,
        query_vector: List[float],
        num_candidates: Optional[int] = None,
        top_k: Optional[int] = None,
        similarity: Optional[str] = None,
        metadata_filter: Optional[Mapping[str, Any]] = None
    ) -> List[Tuple[Dict[str, Any], float]]:
        """
        Semantic search using a query embedding.

        Args:
            query_vector: Query embedding vector
            num_candidates: Candidate pool size (default 100)
            top_k: Number of results to return (default 15)
            similarity: Similarity metric; must match the index definition
            metadata_filter: Optional field path -> predicate filter

        Returns:
            List of (record, score) tuples in the backend's ranking order

        Raises:
            StorageError: If similarity differs from the index definition
            EmbeddingError: If the query vector has the wrong dimension
        """
        similarity = similarity or self.similarity
        if similarity != self.similarity:
            raise StorageError(
                f"Index '{self.index_name}' ranks by {self.similarity}, "
                f"cannot search by {similarity}"
            )

        if len(query_vector) != self.embedding_dim:
            raise EmbeddingError(
                f"Query vector dimension mismatch: "
                f"expected {self.embedding_dim}, got {len(query_vector)}"
            )

        pipeline = self.build_pipeline(
            query_vector,
            num_candidates=num_candidates or self.num_candidates,
            top_k=top_k or self.limit,
            metadata_filter=metadata_filter
        )

        documents = self.db.aggregate(pipeline)

        results = []
        for document in documents:
            score = document.pop(SCORE_FIELD, 0.0)
            results.append((document, float(score)))

        logger.debug(f"Vector search returned {len(results)} results")
        return results

    def index_definition(self) -> Dict[str, Any]:
        """Vector search index definition for the embedding field."""
        fields: List[Dict[str, Any]] = [{
            "type": "vector",
            "path": self.path,
            "numDimensions": self.embedding_dim,
            "similarity": self.similarity,
        }]
        fields.extend({"type": "filter", "path": path} for path in self.filter_paths)
        return {"fields": fields}

    def ensure_index(self) -> bool:
        """
        Create the vector search index if it does not exist yet.

        Returns:
            True if the index was created, False if it already existed
        """
        if not isinstance(self.db, DatabaseService):
            raise TypeError("ensure_index requires a MongoDB DatabaseService")

        with self.db.collection() as collection:
            existing = [index.get("name") for index in collection.list_search_indexes()]
            if self.index_name in existing:
                logger.info(f"Vector index already exists: {self.index_name}")
                return False

            collection.create_search_index(
                SearchIndexModel(
                    definition=self.index_definition(),
                    name=self.index_name,
                    type="vectorSearch",
                )
            )

        logger.info(f"SUCCESS: Vector index created: {self.index_name}")
        return True
