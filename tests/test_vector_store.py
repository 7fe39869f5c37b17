"""
Vector Store Tests

$vectorSearch pipeline shape, result scoring and index definition.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logqa.agent.retrieval.vector_store import VectorStore
from logqa.exceptions import EmbeddingError, StorageError
from logqa.services.database import DatabaseService


class TestVectorStore(unittest.TestCase):

    def setUp(self):
        self.db = MagicMock()
        self.store = VectorStore(self.db)
        self.store.embedding_dim = 3
        self.query_vector = [0.1, 0.2, 0.3]

    def test_pipeline_defaults(self):
        self.db.aggregate.return_value = []
        self.store.search(self.query_vector)

        pipeline = self.db.aggregate.call_args[0][0]
        stage = pipeline[0]["$vectorSearch"]
        self.assertEqual(stage["index"], "vector_index")
        self.assertEqual(stage["path"], "embedding")
        self.assertEqual(stage["queryVector"], self.query_vector)
        self.assertEqual(stage["numCandidates"], 100)
        self.assertEqual(stage["limit"], 15)
        self.assertNotIn("filter", stage)
        self.assertEqual(pipeline[-1], {"$unset": "embedding"})

    def test_filter_is_inside_vector_stage(self):
        pipeline = self.store.build_pipeline(
            self.query_vector,
            num_candidates=50,
            top_k=5,
            metadata_filter={"DeviceId": "ABC123"}
        )

        self.assertEqual(pipeline[0]["$vectorSearch"]["filter"], {"DeviceId": "ABC123"})
        self.assertFalse(any("$match" in stage for stage in pipeline))

    def test_results_carry_scores_in_backend_order(self):
        self.db.aggregate.return_value = [
            {"DeviceId": "A", "_score": 0.91},
            {"DeviceId": "B", "_score": 0.75},
        ]

        results = self.store.search(self.query_vector)

        self.assertEqual(results, [({"DeviceId": "A"}, 0.91), ({"DeviceId": "B"}, 0.75)])

    def test_overrides(self):
        self.db.aggregate.return_value = []
        self.store.search(self.query_vector, num_candidates=200, top_k=3)

        stage = self.db.aggregate.call_args[0][0][0]["$vectorSearch"]
        self.assertEqual(stage["numCandidates"], 200)
        self.assertEqual(stage["limit"], 3)

    def test_similarity_must_match_index(self):
        with self.assertRaises(StorageError):
            self.store.search(self.query_vector, similarity="euclidean")
        self.db.aggregate.assert_not_called()

    def test_dimension_mismatch(self):
        with self.assertRaises(EmbeddingError) as ctx:
            self.store.search([0.1, 0.2])
        self.assertEqual(ctx.exception.subsystem, "AI service")
        self.db.aggregate.assert_not_called()

    def test_index_definition(self):
        definition = self.store.index_definition()
        vector_field = definition["fields"][0]

        self.assertEqual(vector_field["type"], "vector")
        self.assertEqual(vector_field["path"], "embedding")
        self.assertEqual(vector_field["numDimensions"], 3)
        self.assertEqual(vector_field["similarity"], "cosine")
        filter_paths = [field["path"] for field in definition["fields"][1:]]
        self.assertIn("DeviceId", filter_paths)


class TestEnsureIndex(unittest.TestCase):

    def setUp(self):
        self.collection = MagicMock()
        client = MagicMock()
        client.__getitem__.return_value.__getitem__.return_value = self.collection
        self.db = DatabaseService(uri="mongodb://test:27017", client_factory=MagicMock(return_value=client))
        self.store = VectorStore(self.db)

    def test_creates_missing_index(self):
        self.collection.list_search_indexes.return_value = []

        self.assertTrue(self.store.ensure_index())

        model = self.collection.create_search_index.call_args[0][0]
        self.assertEqual(model.document["name"], "vector_index")
        self.assertEqual(model.document["type"], "vectorSearch")

    def test_existing_index_is_left_alone(self):
        self.collection.list_search_indexes.return_value = [{"name": "vector_index"}]

        self.assertFalse(self.store.ensure_index())
        self.collection.create_search_index.assert_not_called()

    def test_requires_database_service(self):
        with self.assertRaises(TypeError):
            VectorStore(MagicMock()).ensure_index()


if __name__ == "__main__":
    unittest.main()
