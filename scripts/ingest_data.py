#!/usr/bin/env python3
"""
Load the knowledge files into the Milvus collections.

Reads data/knowledge/data.txt (collection calendar, chunked) and
data/knowledge/etra_zones.txt (one address per line). Run from project root:

    python scripts/ingest_data.py          # both
    python scripts/ingest_data.py data     # calendar only
    python scripts/ingest_data.py zones    # zones only
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.services.ingestion_service import SOURCES, ingest


def main() -> None:
    parser = argparse.ArgumentParser(description="Ingest knowledge files into the vector store.")
    parser.add_argument(
        "source",
        nargs="?",
        default="all",
        choices=SOURCES,
        help="Which knowledge file to ingest (default: all).",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    report = ingest(args.source)

    print("=" * 60)
    print("Data ingestion completed.")
    for collection, count in report.counts.items():
        print(f"  - {collection}: {count} records")
    print(f"Total records: {report.total}")
    print("=" * 60)


if __name__ == "__main__":
    main()
