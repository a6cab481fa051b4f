"""
Unit tests for the RAG handler (answer_question).
"""

from unittest.mock import MagicMock, patch

from app.agent.prompts import RAG_ANSWER
from app.core.errors import RetrievalError
from app.schemas.outcomes import KnowledgeEntry
from app.services.rag_service import NOT_FOUND_MESSAGE, answer_question, build_context

ENTRIES = [
    KnowledgeEntry(id="file_002", question="How does a neural network work?", answer="Layers of neurons.", score=0.1),
    KnowledgeEntry(id="file_004", question="Main ML algorithm types?", answer="Supervised, unsupervised.", score=0.3),
]


def test_build_context_includes_id_question_answer() -> None:
    context = build_context(ENTRIES)
    assert "File: file_002\nQuestion: How does a neural network work?\nAnswer: Layers of neurons.\n" in context
    assert context.index("file_002") < context.index("file_004")


def test_answer_with_sources_in_retrieval_order() -> None:
    complete = MagicMock(return_value="Neural networks use layers.")
    with patch("app.services.rag_service.search_knowledge", return_value=ENTRIES) as search, \
         patch("app.services.rag_service.complete", complete):
        outcome = answer_question("How do neural networks work?")
    search.assert_called_once_with("How do neural networks work?", 3)
    assert outcome.ok is True
    assert outcome.answer_text == "Neural networks use layers."
    assert outcome.source_ids == ["file_002", "file_004"]
    template_id, variables = complete.call_args.args
    assert template_id == RAG_ANSWER
    assert variables["question"] == "How do neural networks work?"
    assert "file_004" in variables["context"]


def test_custom_limit_is_passed_through() -> None:
    with patch("app.services.rag_service.search_knowledge", return_value=ENTRIES[:1]) as search, \
         patch("app.services.rag_service.complete", return_value="ok"):
        answer_question("q", limit=1)
    search.assert_called_once_with("q", 1)


def test_zero_entries_is_soft_miss() -> None:
    complete = MagicMock()
    with patch("app.services.rag_service.search_knowledge", return_value=[]), \
         patch("app.services.rag_service.complete", complete):
        outcome = answer_question("Unknown topic")
    assert outcome.ok is False
    assert outcome.answer_text == NOT_FOUND_MESSAGE
    assert outcome.source_ids == []
    complete.assert_not_called()


def test_retrieval_failure_is_soft_miss_with_detail() -> None:
    with patch("app.services.rag_service.search_knowledge", side_effect=RetrievalError("all tiers failed")):
        outcome = answer_question("anything")
    assert outcome.ok is False
    assert outcome.answer_text == NOT_FOUND_MESSAGE
    assert outcome.error_detail == "all tiers failed"


def test_completion_failure_is_caught() -> None:
    with patch("app.services.rag_service.search_knowledge", return_value=ENTRIES), \
         patch("app.services.rag_service.complete", side_effect=RuntimeError("rate limited")):
        outcome = answer_question("How do neural networks work?")
    assert outcome.ok is False
    assert outcome.answer_text is None
    assert outcome.source_ids == []
    assert outcome.error_detail == "rate limited"
