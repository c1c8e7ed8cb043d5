"""
Retrieval: semantic search over the collection-calendar knowledge base.

Responsibility: Embed the agent's calendar query, search Milvus, return the
matching chunk texts.
"""

import logging

from app.core.config import CALENDAR_COLLECTION, CALENDAR_SEARCH_TOP_K
from app.services.vector_store import embed_texts, search

logger = logging.getLogger(__name__)


def search_calendar(query: str, top_k: int = CALENDAR_SEARCH_TOP_K) -> dict:
    """
    Search the calendar collection. Returns {"results": [text, ...], "found": bool}.
    Failures are logged and reported as found=False.
    """
    logger.info("[retrieval:search_calendar] IN  query=%r top_k=%d", query, top_k)
    q = (query or "").strip()
    if not q:
        return {"results": [], "found": False}
    try:
        vector = embed_texts([q])[0]
        hits = search(CALENDAR_COLLECTION, vector, top_k=top_k)
    except Exception as e:
        logger.error("[retrieval:search_calendar] search failed: %s", e)
        return {"results": [], "found": False}

    texts = [t for t in ((h.get("metadata") or {}).get("text") for h in hits) if t]
    logger.info("[retrieval:search_calendar] OUT results=%d", len(texts))
    for i, t in enumerate(texts):
        logger.debug("[retrieval:search_calendar] result_%d text=%r", i + 1, t[:200])
    return {"results": texts, "found": bool(texts)}
