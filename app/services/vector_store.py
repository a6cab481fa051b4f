"""
Vector store client: Milvus Cloud connection, embeddings (HF Inference API), and knowledge-entry storage.

Responsibility: Connect to Milvus, embed texts via all-MiniLM-L6-v2, store question/answer
entries, and expose the three raw lookups the retrieval fallback chain is built from.
"""

import logging
from typing import Any

import httpx
from pymilvus import MilvusClient

from app.core.config import (
    COLLECTION_NAME,
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    MILVUS_TOKEN,
    MILVUS_URI,
    VECTOR_DIM,
)
from app.core.errors import ServiceUnavailableError
from app.schemas.outcomes import KnowledgeEntry

logger = logging.getLogger(__name__)

HF_API_URL_ROUTER = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)
HF_API_URL_STANDARD = f"https://api-inference.huggingface.co/models/{HF_EMBED_MODEL}"

ENTRY_FIELDS = ["file_id", "question", "answer"]


def embed_texts(
    texts: list[str], batch_size: int | None = None
) -> list[list[float]]:
    """
    Batch embed texts using Hugging Face Inference API (all-MiniLM-L6-v2).

    Returns list of 384-dim vectors (normalized for cosine similarity).
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if not HF_API_KEY:
        raise ServiceUnavailableError(
            "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens"
        )

    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    all_embeddings: list[list[float]] = []

    with httpx.Client(timeout=EMBED_API_TIMEOUT) as client:
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            payload = {"inputs": batch, "options": {"wait_for_model": True}}
            api_urls = [HF_API_URL_ROUTER, HF_API_URL_STANDARD]
            response = None
            last_error: str | None = None

            for api_url in api_urls:
                try:
                    response = client.post(api_url, json=payload, headers=headers)
                    if response.status_code == 200:
                        break
                    if response.status_code == 403 and api_url == HF_API_URL_ROUTER:
                        last_error = response.text
                        continue
                    break
                except httpx.HTTPError as e:
                    last_error = str(e)
                    if api_url == api_urls[-1]:
                        raise
                    continue

            if response is None or response.status_code != 200:
                msg = response.text if response is not None else last_error
                if response is not None and response.status_code == 503:
                    raise RuntimeError(f"HF model is loading. Retry later. {msg}")
                if response is not None and response.status_code in (401, 403):
                    raise ServiceUnavailableError(f"HF token rejected by the Inference API. {msg}")
                raise RuntimeError(f"HF API error: {msg}")

            result = response.json()
            if isinstance(result, list) and result and isinstance(result[0], list):
                batch_emb = result
            else:
                batch_emb = [
                    item if isinstance(item, list) else [item]
                    for item in (result if isinstance(result, list) else [result])
                ]

            # Normalize for cosine similarity (Milvus COSINE)
            for vec in batch_emb:
                norm = sum(x * x for x in vec) ** 0.5
                if norm == 0:
                    norm = 1.0
                all_embeddings.append([x / norm for x in vec])

    return all_embeddings


def get_milvus_client() -> MilvusClient:
    """
    Connect to Milvus Cloud and return a client. Creates the knowledge collection
    if it does not exist (dim 384, dynamic fields hold file_id/question/answer).
    """
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ServiceUnavailableError("MILVUS_URI and MILVUS_TOKEN must be set in .env")

    client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
    logger.info("Milvus connection established")

    if not client.has_collection(COLLECTION_NAME):
        client.create_collection(
            collection_name=COLLECTION_NAME,
            dimension=VECTOR_DIM,
            primary_field_name="id",
            vector_field_name="vector",
            metric_type="COSINE",
            auto_id=True,
            enable_dynamic_field=True,
        )
        logger.info("Collection %s created (dim=%s)", COLLECTION_NAME, VECTOR_DIM)
    return client


def _to_entry(row: dict[str, Any]) -> KnowledgeEntry:
    """Map a Milvus search hit or query row to a KnowledgeEntry."""
    entity = row.get("entity") or row
    score = row.get("distance", row.get("score"))
    return KnowledgeEntry(
        id=str(entity.get("file_id") or row.get("id", "")),
        question=entity.get("question") or "",
        answer=entity.get("answer") or "",
        score=float(score) if score is not None else None,
    )


def store_entries(entries: list[dict]) -> int:
    """
    Embed each entry (question + answer) and insert it into Milvus with its
    file_id, question and answer, then flush. Returns the number of rows written.
    """
    if not entries:
        return 0

    texts = [f"{e['question']}\n{e['answer']}" for e in entries]
    embeddings = embed_texts(texts)

    client = get_milvus_client()
    rows = [
        {
            "vector": emb,
            "file_id": e["file_id"],
            "question": e["question"],
            "answer": e["answer"],
        }
        for e, emb in zip(entries, embeddings)
    ]
    client.insert(collection_name=COLLECTION_NAME, data=rows)
    client.flush(collection_name=COLLECTION_NAME)
    logger.info("Embedded and stored %d knowledge entries", len(rows))
    return len(rows)


def similarity_search(query: str, limit: int) -> list[KnowledgeEntry]:
    """Embed the query and return the top-`limit` entries by cosine similarity, score attached."""
    logger.info("[vector_store:similarity_search] IN  query=%r limit=%d", query, limit)
    query_vec = embed_texts([query.strip()])
    if not query_vec:
        raise RuntimeError("embed_texts returned no vector for the query")
    client = get_milvus_client()
    results = client.search(
        collection_name=COLLECTION_NAME,
        data=query_vec,
        limit=limit,
        output_fields=ENTRY_FIELDS,
    )
    # results: list of list of hits (one list per query vector)
    hits = results[0] if results else []
    entries = [_to_entry(h) for h in hits]
    logger.info("[vector_store:similarity_search] OUT entries=%d ids=%s", len(entries), [e.id for e in entries])
    return entries


def _keyword_filter(keywords: list[str]) -> str:
    clauses = []
    for kw in keywords:
        for variant in dict.fromkeys((kw.lower(), kw.capitalize())):
            for field in ("question", "answer"):
                clauses.append(f'{field} like "%{variant}%"')
    return " or ".join(clauses)


def keyword_search(keywords: list[str], limit: int) -> list[KnowledgeEntry]:
    """Return up to `limit` entries whose question or answer contains any of the keywords."""
    expr = _keyword_filter(keywords)
    logger.info("[vector_store:keyword_search] IN  keywords=%s limit=%d", keywords, limit)
    client = get_milvus_client()
    rows = client.query(
        collection_name=COLLECTION_NAME,
        filter=expr,
        limit=limit,
        output_fields=ENTRY_FIELDS,
    )
    entries = [_to_entry(r) for r in rows]
    logger.info("[vector_store:keyword_search] OUT entries=%d", len(entries))
    return entries


def fetch_entries(limit: int) -> list[KnowledgeEntry]:
    """Return up to `limit` entries with no filter at all."""
    logger.info("[vector_store:fetch_entries] IN  limit=%d", limit)
    client = get_milvus_client()
    rows = client.query(
        collection_name=COLLECTION_NAME,
        filter="",
        limit=limit,
        output_fields=ENTRY_FIELDS,
    )
    entries = [_to_entry(r) for r in rows]
    logger.info("[vector_store:fetch_entries] OUT entries=%d", len(entries))
    return entries


def clear_knowledge_base() -> None:
    """
    Remove all data from the knowledge base by dropping the Milvus collection.
    The collection will be recreated empty on the next get_milvus_client() call.
    """
    client = get_milvus_client()
    if client.has_collection(COLLECTION_NAME):
        client.drop_collection(collection_name=COLLECTION_NAME)
        logger.info("Knowledge base cleared: collection %s dropped", COLLECTION_NAME)


def get_collection_stats() -> dict:
    """Return knowledge-base stats: collection name and total entries."""
    client = get_milvus_client()
    stats = client.get_collection_stats(collection_name=COLLECTION_NAME)
    return {
        "collection_name": COLLECTION_NAME,
        "total_entries": int(stats.get("row_count", 0)),
    }
