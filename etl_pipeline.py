#!/usr/bin/env python3
"""
DeviceLog QA - Embedding Backfill

Embeds every log record that has no `embedding` field yet so it can be
found by semantic search.

Usage:
    python etl_pipeline.py                  # Embed all pending records
    python etl_pipeline.py --limit 500      # Embed at most 500 records
    python etl_pipeline.py --create-index   # Also create the vector search index if missing
    python etl_pipeline.py --help           # Show this help message
"""

import sys
import argparse
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from logqa.agent.indexing.embedder import LogEmbedder
from logqa.agent.retrieval.vector_store import VectorStore
from logqa.logging_config import setup_logging
from logqa.services.database import DatabaseService


def main(argv=None) -> dict:
    parser = argparse.ArgumentParser(description="Backfill embeddings on device log records.")
    parser.add_argument("--limit", type=int, default=0, help="stop after this many records (0 = all)")
    parser.add_argument("--create-index", action="store_true", help="create the vector search index if missing")
    parser.add_argument("--log-level", help="override the configured log level")
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level)

    db = DatabaseService()
    summary = {"success": False}

    if args.create_index:
        created = VectorStore(db).ensure_index()
        summary["index_created"] = created

    result = LogEmbedder(db=db).embed_pending(limit=args.limit)
    summary.update({
        "embedded": result.embedded,
        "skipped": result.skipped,
        "failed": result.failed,
        "success": result.failed == 0,
    })
    return summary


def run(argv=None) -> int:
    """Run the backfill, print the summary and return the process exit code."""
    print("\n" + "="*60)
    print("DeviceLog QA - Embedding Backfill")
    print("="*60 + "\n")

    try:
        summary = main(argv)

        # Print summary
        print("\n" + "="*60)
        print("EXECUTION SUMMARY")
        print("="*60)
        for key, value in summary.items():
            print(f"  {key}: {value}")
        print("="*60 + "\n")

        return 0 if summary.get("success") else 1

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        return 130
    except Exception as e:
        print(f"\n\nFATAL ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(run())
