"""
Query Service Tests

Projection building, row flattening and the structured lookups, run
against a mocked LogStore.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logqa.exceptions import StorageError
from logqa.services.query_service import (
    QueryService,
    build_projection,
    build_unique_pipeline,
    flatten_rows,
)


class TestProjection(unittest.TestCase):

    def test_requested_fields_only(self):
        self.assertEqual(
            build_projection(["DeviceId", "LogData.Model"]),
            {"DeviceId": 1, "LogData.Model": 1, "_id": 0}
        )

    def test_nested_path_under_requested_parent_is_dropped(self):
        self.assertEqual(
            build_projection(["LogData", "LogData.Ward"]),
            {"LogData": 1, "_id": 0}
        )

    def test_id_kept_when_requested(self):
        self.assertEqual(build_projection(["_id", "DeviceId"]), {"_id": 1, "DeviceId": 1})


class TestFlattenRows(unittest.TestCase):

    def test_cells_follow_field_order(self):
        records = [
            {"DeviceId": "A", "LogData": {"Model": "P-100"}},
            {"DeviceId": "B"},
        ]
        rows = flatten_rows(records, ["LogData.Model", "DeviceId"])
        self.assertEqual(rows, [["P-100", "A"], ["", "B"]])

    def test_falsy_values_are_kept(self):
        rows = flatten_rows([{"LogData": {"EpochCount": 0}}], ["LogData.EpochCount"])
        self.assertEqual(rows, [[0]])


class TestQueryService(unittest.TestCase):

    def setUp(self):
        self.db = MagicMock()
        self.service = QueryService(self.db)
        self.service.find_limit = 100
        self.service.dump_limit = 50
        self.service.unique_limit = 3

    def test_find_projected(self):
        self.db.find.return_value = [{"DeviceId": "A"}]

        records = self.service.find_projected(
            ["DeviceId"],
            {"DeviceId": "A", "LogData.Ward": ""}
        )

        self.assertEqual(records, [{"DeviceId": "A"}])
        self.db.find.assert_called_once_with(
            {"DeviceId": "A"},
            projection={"DeviceId": 1, "_id": 0},
            limit=100
        )

    def test_unique_values_under_cap(self):
        self.db.aggregate.return_value = [{"_id": "ER"}, {"_id": "ICU"}]
        values, truncated = self.service.unique_values("LogData.Ward")
        self.assertEqual(values, ["ER", "ICU"])
        self.assertFalse(truncated)

    def test_unique_values_over_cap(self):
        self.db.aggregate.return_value = [{"_id": value} for value in "abcd"]
        values, truncated = self.service.unique_values("LogData.Ward")
        self.assertEqual(values, ["a", "b", "c"])
        self.assertTrue(truncated)

    def test_unique_values_exactly_at_cap(self):
        self.db.aggregate.return_value = [{"_id": value} for value in "abc"]
        values, truncated = self.service.unique_values("LogData.Ward")
        self.assertEqual(len(values), 3)
        self.assertFalse(truncated)

    def test_unique_lookup_is_bounded_in_the_database(self):
        self.db.aggregate.return_value = []
        self.service.unique_values("LogData.Ward")

        pipeline = self.db.aggregate.call_args[0][0]
        self.assertEqual(pipeline, build_unique_pipeline("LogData.Ward", 3))
        self.assertIn({"$group": {"_id": "$LogData.Ward"}}, pipeline)
        self.assertEqual(pipeline[-1], {"$limit": 4})

    def test_dump_strips_embeddings(self):
        self.db.find.return_value = [
            {"DeviceId": "A", "embedding": [0.1, 0.2]},
            {"DeviceId": "B"},
        ]

        records = self.service.dump_logs({"DeviceId": "A"})

        self.assertEqual(records, [{"DeviceId": "A"}, {"DeviceId": "B"}])
        self.db.find.assert_called_once_with({"DeviceId": "A"}, limit=50)

    def test_dump_without_filters(self):
        self.db.find.return_value = []
        self.assertEqual(self.service.dump_logs(), [])
        self.db.find.assert_called_once_with({}, limit=50)

    def test_storage_errors_propagate(self):
        self.db.aggregate.side_effect = StorageError("connection refused")
        with self.assertRaises(StorageError):
            self.service.unique_values("LogData.Ward")


if __name__ == "__main__":
    unittest.main()
