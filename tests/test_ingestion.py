"""
Unit tests for knowledge ingestion. The vector store is patched out.
"""

from unittest.mock import patch

import pytest

from app.core.config import CALENDAR_COLLECTION, ZONES_COLLECTION
from app.services.ingestion_service import build_calendar_records, build_zone_records, ingest

ZONES_FILE = """# ETRA - Database Indirizzi e Codici per Raccolta Rifiuti
# Formato: INDIRIZZO | COMUNE | CODICE_INDIRIZZO | CODICE_COMUNE

VIA ROMA | CITTADELLA | 12345 | 028032
  PIAZZA GARIBALDI | PIOMBINO DESE | 67890 | 028063

VIA SENZA CODICE | LIMENA
"""


def test_zone_records_one_per_address_line() -> None:
    records = build_zone_records(ZONES_FILE, "etra_zones.txt")
    assert [r["text"] for r in records] == [
        "VIA ROMA | CITTADELLA | 12345 | 028032",
        "PIAZZA GARIBALDI | PIOMBINO DESE | 67890 | 028063",
        "VIA SENZA CODICE | LIMENA",
    ]
    assert records[1]["metadata"] == {
        "address": "PIAZZA GARIBALDI",
        "municipality": "PIOMBINO DESE",
        "address_code": "67890",
        "municipality_code": "028063",
        "line_index": 1,
        "source": "etra_zones.txt",
    }
    assert records[2]["metadata"]["address_code"] == ""
    assert records[2]["metadata"]["municipality_code"] == ""


def test_calendar_records_are_indexed_chunks() -> None:
    text = "\n".join(f"2025-03-{d:02d} zona A Cittadella: carta e cartone" for d in range(1, 31))
    records = build_calendar_records(text, "data.txt")
    assert len(records) >= 2
    assert [r["metadata"]["chunk_index"] for r in records] == list(range(len(records)))
    assert all(r["metadata"]["source"] == "data.txt" for r in records)
    assert all(len(r["text"]) <= 512 for r in records)


def test_ingest_zones_stores_in_zones_collection(tmp_path) -> None:
    (tmp_path / "etra_zones.txt").write_text(ZONES_FILE, encoding="utf-8")
    with patch("app.services.ingestion_service.knowledge_path", side_effect=lambda name: tmp_path / name), \
         patch("app.services.ingestion_service.store_records", side_effect=lambda c, r: len(r)) as mock_store:
        report = ingest("zones")

    assert report.counts == {ZONES_COLLECTION: 3}
    assert report.total == 3
    collection, records = mock_store.call_args.args
    assert collection == ZONES_COLLECTION
    assert len(records) == 3


def test_ingest_all_skips_missing_files(tmp_path) -> None:
    (tmp_path / "data.txt").write_text("2025-01-07 zona B Limena: vetro", encoding="utf-8")
    with patch("app.services.ingestion_service.knowledge_path", side_effect=lambda name: tmp_path / name), \
         patch("app.services.ingestion_service.store_records", side_effect=lambda c, r: len(r)) as mock_store:
        report = ingest("all")

    assert report.counts == {CALENDAR_COLLECTION: 1, ZONES_COLLECTION: 0}
    mock_store.assert_called_once()
    assert mock_store.call_args.args[0] == CALENDAR_COLLECTION


def test_ingest_rejects_unknown_source() -> None:
    with pytest.raises(ValueError):
        ingest("pdf")
