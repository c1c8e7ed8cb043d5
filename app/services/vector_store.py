"""
Vector store client: Milvus Cloud connection, OpenAI embeddings, record storage and search.

Responsibility: Connect to Milvus, embed texts via text-embedding-3-small, store
records with metadata, run cosine-similarity searches. Two collections are used:
waste_collection_zones (one address per record) and waste_collection_info
(calendar chunks).
"""

import logging
from typing import Any

from openai import OpenAI

from app.core.config import (
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    MILVUS_TOKEN,
    MILVUS_URI,
    OPENAI_API_KEY,
    OPENAI_EMBED_MODEL,
    VECTOR_DIM,
)
from app.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def embed_texts(
    texts: list[str], batch_size: int | None = None, timeout: float = EMBED_API_TIMEOUT
) -> list[list[float]]:
    """
    Batch embed texts with the OpenAI embeddings API.

    Returns one VECTOR_DIM vector per input text, in input order.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY must be set in .env")

    client = OpenAI(api_key=OPENAI_API_KEY, timeout=timeout, max_retries=0)
    all_embeddings: list[list[float]] = []
    for i in range(0, len(texts), batch_size):
        batch = texts[i : i + batch_size]
        response = client.embeddings.create(model=OPENAI_EMBED_MODEL, input=batch)
        ordered = sorted(response.data, key=lambda d: d.index)
        all_embeddings.extend(list(d.embedding) for d in ordered)
    logger.info("[vector_store:embed_texts] embedded %d texts", len(all_embeddings))
    return all_embeddings


def get_milvus_client() -> Any:
    """Connect to Milvus Cloud and return a client."""
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ServiceUnavailableError("MILVUS_URI and MILVUS_TOKEN must be set in .env")

    from pymilvus import MilvusClient

    client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
    logger.info("Milvus connection established")
    return client


def ensure_collection(client: Any, collection_name: str) -> None:
    """Create a cosine-metric collection with dynamic metadata fields if missing."""
    if client.has_collection(collection_name):
        logger.info("Collection %s already exists", collection_name)
        return
    client.create_collection(
        collection_name=collection_name,
        dimension=VECTOR_DIM,
        primary_field_name="id",
        vector_field_name="vector",
        metric_type="COSINE",
        auto_id=True,
        enable_dynamic_field=True,
    )
    logger.info("Collection %s created (dim=%s)", collection_name, VECTOR_DIM)


def store_records(collection_name: str, records: list[dict]) -> int:
    """
    Embed each record's "text" and insert it with its metadata fields, then flush.
    Each record is {"text": str, "metadata": dict}. Returns the number stored.
    """
    if not records:
        return 0

    embeddings = embed_texts([r["text"] for r in records])

    client = get_milvus_client()
    ensure_collection(client, collection_name)
    rows = []
    for r, emb in zip(records, embeddings):
        row = dict(r.get("metadata") or {})
        row["text"] = r["text"]
        row["vector"] = emb
        rows.append(row)

    client.insert(collection_name=collection_name, data=rows)
    client.flush(collection_name=collection_name)
    logger.info("Embedded and stored %d records in %s", len(rows), collection_name)
    return len(rows)


def search(
    collection_name: str,
    query_vector: list[float],
    top_k: int,
    output_fields: list[str] | None = None,
) -> list[dict]:
    """
    Cosine-similarity search. Returns [{"id", "score", "metadata"}] best first;
    with the COSINE metric Milvus reports similarity as "distance".
    """
    fields = output_fields or ["text"]
    client = get_milvus_client()
    results = client.search(
        collection_name=collection_name,
        data=[query_vector],
        limit=top_k,
        output_fields=fields,
    )
    hits = results[0] if results else []
    candidates = []
    for h in hits:
        entity = h.get("entity") or {}
        candidates.append({
            "id": h.get("id"),
            "score": float(h.get("distance", h.get("score", 0.0))),
            "metadata": {f: entity.get(f) for f in fields if f in entity},
        })
    logger.info(
        "[vector_store:search] collection=%s top_k=%d hits=%d scores=%s",
        collection_name, top_k, len(candidates), [round(c["score"], 4) for c in candidates],
    )
    return candidates


def get_collection_stats(collection_name: str) -> dict:
    """Return record count and a few sample texts for a collection."""
    client = get_milvus_client()
    if not client.has_collection(collection_name):
        return {"collection_name": collection_name, "exists": False, "total_records": 0, "samples": []}
    stats = client.get_collection_stats(collection_name=collection_name)
    samples = client.query(
        collection_name=collection_name,
        filter="",
        limit=3,
        output_fields=["text"],
    )
    return {
        "collection_name": collection_name,
        "exists": True,
        "total_records": int(stats.get("row_count", 0)),
        "samples": [(s.get("text") or "")[:80] for s in samples],
    }
