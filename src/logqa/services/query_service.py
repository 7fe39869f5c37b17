"""
Query Service

Structured, read-only lookups over the device_logs collection:
projected finds, distinct values and full-record dumps.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .database import DatabaseService
from .protocols import LogStore
from ..agent.core.query_parser import clean_filters
from ..config_loader import config
from ..models import EMBEDDING_FIELD, get_path

logger = logging.getLogger(__name__)


def build_projection(fields: Sequence[str]) -> Dict[str, int]:
    """
    Projection that keeps exactly the requested paths.

    A path nested under another requested path is dropped (MongoDB
    rejects overlapping projections), and _id is hidden unless asked for.
    """
    projection: Dict[str, int] = {}
    for field in fields:
        covered = any(field.startswith(f"{other}.") for other in fields if other != field)
        if not covered:
            projection[field] = 1
    if "_id" not in projection:
        projection["_id"] = 0
    return projection


def flatten_rows(records: Sequence[Mapping[str, Any]], fields: Sequence[str]) -> List[List[Any]]:
    """
    One row per record, one cell per field. Missing paths become "".
    """
    rows = []
    for record in records:
        row = []
        for field in fields:
            value = get_path(record, field)
            row.append("" if value is None else value)
        rows.append(row)
    return rows


def build_unique_pipeline(field: str, limit: int) -> List[Dict[str, Any]]:
    """
    Aggregation returning up to limit + 1 distinct values of one path,
    sorted ascending. Records missing the path are left out.
    """
    return [
        {"$match": {field: {"$ne": None}}},
        {"$group": {"_id": f"${field}"}},
        {"$sort": {"_id": 1}},
        {"$limit": limit + 1},
    ]


class QueryService:
    """
    Structured retrieval over log records.

    Every call opens and releases its own storage connection through
    the LogStore; StorageError propagates to the caller untouched.
    """

    def __init__(self, db: Optional[LogStore] = None):
        """
        Initialize query service.

        Args:
            db: LogStore implementation. If None, creates a DatabaseService.
        """
        self.db = db or DatabaseService()

        structured_config = config.get_section('structured')
        self.find_limit = structured_config.get('find_limit', 100)
        self.dump_limit = structured_config.get('dump_limit', 50)
        self.unique_limit = structured_config.get('unique_limit', 1000)

        logger.info(
            f"QueryService initialized (find_limit={self.find_limit}, "
            f"dump_limit={self.dump_limit}, unique_limit={self.unique_limit})"
        )

    def find_projected(
        self,
        fields: Sequence[str],
        filters: Optional[Mapping[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Filtered find returning only the requested fields.

        Args:
            fields: Canonical field paths to project
            filters: Field path -> predicate

        Returns:
            Up to find_limit projected records
        """
        filters = clean_filters(filters)
        projection = build_projection(fields)

        logger.info(f"MongoDB filters: {filters}")
        logger.info(f"Projecting fields: {list(fields)}")

        records = self.db.find(filters, projection=projection, limit=self.find_limit)
        logger.debug(f"Projected find returned {len(records)} records")
        return records

    def unique_values(self, field: str) -> Tuple[List[Any], bool]:
        """
        Distinct values of one field across all records.

        Runs as a $group aggregation with a $limit of unique_limit + 1, so
        MongoDB never sends more than one value past the cap.

        Args:
            field: Canonical field path

        Returns:
            Tuple of (values, truncated). At most unique_limit values are
            kept; truncated is True when more existed.
        """
        rows = self.db.aggregate(build_unique_pipeline(field, self.unique_limit))
        values = [row["_id"] for row in rows]

        truncated = len(values) > self.unique_limit
        if truncated:
            logger.warning(f"More than {self.unique_limit} distinct values for '{field}', truncating")
            values = values[:self.unique_limit]
        return values, truncated

    def dump_logs(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Full records for display, without their embedding vectors.

        Args:
            filters: Field path -> predicate

        Returns:
            Up to dump_limit records
        """
        filters = clean_filters(filters)
        logger.info(f"MongoDB filters: {filters}")

        records = self.db.find(filters, limit=self.dump_limit)
        return [
            {key: value for key, value in record.items() if key != EMBEDDING_FIELD}
            for record in records
        ]
