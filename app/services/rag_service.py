"""
RAG handler: retrieve knowledge entries and synthesize a sourced answer.

Never raises; every failure comes back as a RetrievalOutcome with ok=False.
"""

import logging

from app.agent.llm import complete
from app.agent.prompts import RAG_ANSWER
from app.core.config import RAG_RESULT_LIMIT
from app.core.errors import RetrievalError
from app.schemas.outcomes import KnowledgeEntry, RetrievalOutcome
from app.services.retrieval_service import search_knowledge

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "I could not find relevant information in the database."


def build_context(entries: list[KnowledgeEntry]) -> str:
    """Concatenate id, question and answer of each entry into one context block."""
    return "\n".join(
        f"File: {e.id}\nQuestion: {e.question}\nAnswer: {e.answer}\n" for e in entries
    )


def answer_question(query: str, limit: int = RAG_RESULT_LIMIT) -> RetrievalOutcome:
    logger.info("[rag:answer_question] IN  query=%r limit=%d", query, limit)
    try:
        entries = search_knowledge(query, limit)
    except RetrievalError as e:
        logger.warning("[rag:answer_question] retrieval failed: %s", e)
        return RetrievalOutcome(ok=False, answer_text=NOT_FOUND_MESSAGE, error_detail=str(e))

    if not entries:
        logger.info("[rag:answer_question] OUT no entries found")
        return RetrievalOutcome(ok=False, answer_text=NOT_FOUND_MESSAGE)

    source_ids = [e.id for e in entries]
    context = build_context(entries)
    logger.info("[rag:answer_question] sources=%s context_len=%d", source_ids, len(context))
    try:
        answer = complete(RAG_ANSWER, {"context": context, "question": query})
    except Exception as e:
        logger.exception("[rag:answer_question] answer synthesis failed")
        return RetrievalOutcome(ok=False, error_detail=str(e))

    logger.info("[rag:answer_question] OUT answer_len=%d", len(answer))
    return RetrievalOutcome(ok=True, answer_text=answer, source_ids=source_ids)
