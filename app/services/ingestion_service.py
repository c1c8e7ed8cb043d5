"""
Knowledge ingestion: load the calendar text and the address/zone dataset into Milvus.

Responsibility: Read knowledge files, clean and chunk the calendar, parse the
zones file line by line (one address = one record), and hand records to the
vector store. No HTTP or FastAPI here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from app.core.config import (
    CALENDAR_COLLECTION,
    CALENDAR_FILE_NAME,
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    KNOWLEDGE_DIR_NAME,
    ZONES_COLLECTION,
    ZONES_FILE_NAME,
)
from app.services.text_processing import chunk_text, clean_text
from app.services.vector_store import store_records

logger = logging.getLogger(__name__)

SOURCES = ("all", "data", "zones")


@dataclass
class IngestionReport:
    """Records stored per collection for one ingestion run."""

    counts: dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def knowledge_path(file_name: str) -> Path:
    return _project_root() / KNOWLEDGE_DIR_NAME / file_name


def build_calendar_records(text: str, source: str) -> list[dict]:
    """Clean and chunk calendar text into records with text/chunk_index/source metadata."""
    chunks = chunk_text(clean_text(text), chunk_size=CHUNK_SIZE, overlap=CHUNK_OVERLAP)
    return [
        {"text": chunk, "metadata": {"chunk_index": i, "source": source}}
        for i, chunk in enumerate(chunks)
    ]


def build_zone_records(text: str, source: str) -> list[dict]:
    """
    One record per non-empty, non-comment line of the zones file
    (ADDRESS | MUNICIPALITY | ADDRESS_CODE | MUNICIPALITY_CODE).
    Missing trailing fields are stored as empty strings.
    """
    lines = [ln.strip() for ln in (text or "").splitlines()]
    lines = [ln for ln in lines if ln and not ln.startswith("#")]
    records = []
    for i, line in enumerate(lines):
        parts = [p.strip() for p in line.split("|")] + ["", "", ""]
        records.append({
            "text": line,
            "metadata": {
                "address": parts[0],
                "municipality": parts[1],
                "address_code": parts[2],
                "municipality_code": parts[3],
                "line_index": i,
                "source": source,
            },
        })
    return records


def ingest_file(path: Path, collection_name: str, line_by_line: bool = False) -> int:
    """Ingest one knowledge file. A missing file is skipped with a warning."""
    if not path.is_file():
        logger.warning("[ingestion] file %s not found, skipping", path.name)
        return 0
    text = path.read_text(encoding="utf-8")
    if line_by_line:
        records = build_zone_records(text, path.name)
    else:
        records = build_calendar_records(text, path.name)
    logger.info("[ingestion] %s -> %d records for %s", path.name, len(records), collection_name)
    return store_records(collection_name, records)


def ingest(source: str = "all") -> IngestionReport:
    """Ingest the calendar ("data"), the zones dataset ("zones"), or both ("all")."""
    if source not in SOURCES:
        raise ValueError(f"Invalid source {source!r}; expected one of {', '.join(SOURCES)}")
    counts: dict[str, int] = {}
    if source in ("all", "data"):
        counts[CALENDAR_COLLECTION] = ingest_file(knowledge_path(CALENDAR_FILE_NAME), CALENDAR_COLLECTION)
    if source in ("all", "zones"):
        counts[ZONES_COLLECTION] = ingest_file(
            knowledge_path(ZONES_FILE_NAME), ZONES_COLLECTION, line_by_line=True
        )
    return IngestionReport(counts=counts)
