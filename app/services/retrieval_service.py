"""
Retrieval: knowledge-base search with a three-tier fallback.

Responsibility: similarity search → keyword search → unrestricted fetch. A tier runs
only when the previous tier raised; an empty but successful result is returned as-is.
"""

import logging
import re

from app.core.config import KEYWORD_STOP_WORDS, MAX_KEYWORDS, RAG_RESULT_LIMIT
from app.core.errors import RetrievalError
from app.schemas.outcomes import KnowledgeEntry
from app.services.vector_store import fetch_entries, keyword_search, similarity_search

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")


def extract_keywords(query: str, max_keywords: int = MAX_KEYWORDS) -> list[str]:
    """
    Pick the first significant words of the query, in order.

    Lower-cases, replaces punctuation with spaces, drops words of length <= 2 and stop words.
    """
    words = _PUNCTUATION.sub(" ", (query or "").lower()).split()
    keywords = [w for w in words if len(w) > 2 and w not in KEYWORD_STOP_WORDS]
    return keywords[:max_keywords]


def search_knowledge(query: str, limit: int = RAG_RESULT_LIMIT) -> list[KnowledgeEntry]:
    """
    Return up to `limit` knowledge entries for the query.

    Raises RetrievalError when the last tier also fails.
    """
    logger.info("[retrieval:search_knowledge] IN  query=%r limit=%d", query, limit)
    try:
        entries = similarity_search(query, limit)
        logger.info("[retrieval:search_knowledge] OUT tier=similarity entries=%d", len(entries))
        return entries
    except Exception as e:
        logger.warning("[retrieval:search_knowledge] similarity search failed: %s", e)

    keywords = extract_keywords(query)
    if keywords:
        try:
            entries = keyword_search(keywords, limit)
            logger.info("[retrieval:search_knowledge] OUT tier=keyword keywords=%s entries=%d", keywords, len(entries))
            return entries
        except Exception as e:
            logger.warning("[retrieval:search_knowledge] keyword search failed: %s", e)
    else:
        logger.info("[retrieval:search_knowledge] no keywords in query; skipping keyword search")

    try:
        entries = fetch_entries(limit)
    except Exception as e:
        logger.exception("[retrieval:search_knowledge] all search tiers failed")
        raise RetrievalError(f"Both vector search and fallback failed: {e}") from e
    logger.info("[retrieval:search_knowledge] OUT tier=fetch entries=%d", len(entries))
    return entries
