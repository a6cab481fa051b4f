"""
Integration tests for the HTTP endpoints.

Uses mocks for the agent, vector store and LLM so tests do not require Milvus or API keys.
"""

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.agent.prompts import CLASSIFY_INTENT, DIRECT_REPLY
from app.core.errors import ServiceUnavailableError
from app.main import app
from app.schemas.outcomes import RetrievalOutcome
from app.schemas.query import FinalResponse


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_query_serializes_wire_field_names(client: TestClient) -> None:
    """POST /query returns answer, references, fileIds, chartConfig."""
    final = FinalResponse(
        answer_text="Machine learning is ...",
        source_references={"ragSources": ["file_001"]},
        source_ids=["file_001"],
        chart_spec=None,
    )
    with patch("app.api.routes.process_query", return_value=final) as process:
        response = client.post("/query", json={"query": "  What is machine learning?  "})
    assert response.status_code == 200
    process.assert_called_once_with("What is machine learning?")
    assert response.json() == {
        "success": True,
        "query": "What is machine learning?",
        "response": {
            "answer": "Machine learning is ...",
            "references": {"ragSources": ["file_001"]},
            "fileIds": ["file_001"],
            "chartConfig": None,
        },
    }


@pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}])
def test_query_rejects_empty(client: TestClient, body: dict) -> None:
    assert client.post("/query", json=body).status_code == 422


def test_query_direct_end_to_end(client: TestClient) -> None:
    """A greeting goes through the real graph and comes back without chart or sources."""

    def _complete(template_id, variables, **kwargs):
        return {CLASSIFY_INTENT: "direct", DIRECT_REPLY: "I'm doing well, thanks!"}[template_id]

    with patch("app.agent.graph.complete", side_effect=_complete):
        response = client.post("/query", json={"query": "Hello, how are you?"})
    data = response.json()["response"]
    assert data["answer"] == "I'm doing well, thanks!"
    assert data["chartConfig"] is None
    assert data["fileIds"] == []


def test_query_chart_end_to_end(client: TestClient) -> None:
    raw = '{"chartType": "bar", "title": "Q1 Sales", "data": "sales for Q1"}'
    with patch("app.agent.graph.complete", return_value="chart"), \
         patch("app.services.visualization_service.complete", return_value=raw):
        response = client.post("/query", json={"query": "Create a bar chart showing sales data for Q1"})
    data = response.json()["response"]
    assert data["chartConfig"]["type"] in {"bar", "line", "pie", "doughnut", "radar"}
    assert data["chartConfig"]["options"]["plugins"]["title"]["text"] == "Q1 Sales"
    assert data["fileIds"] == []
    assert data["answer"] == "Generated bar chart for: Q1 Sales"


def test_query_stream_emits_decision_steps_and_answer(client: TestClient) -> None:
    def _complete(template_id, variables, **kwargs):
        return {CLASSIFY_INTENT: "direct", DIRECT_REPLY: "Hi!"}[template_id]

    with patch("app.agent.graph.complete", side_effect=_complete):
        response = client.post("/query/stream", json={"query": "Hi"})
    assert response.status_code == 200
    events = [block for block in response.text.split("\n\n") if block.strip()]
    names = [block.split("\n")[0].removeprefix("event: ") for block in events]
    assert names == ["decision", "step", "answer"]
    answer = json.loads(events[-1].split("\n")[1].removeprefix("data: "))
    assert answer == {"answer": "Hi!", "references": {}, "fileIds": [], "chartConfig": None}


def test_setup_seeds_samples(client: TestClient) -> None:
    with patch("app.services.ingestion_service.store_entries", return_value=5), \
         patch("app.services.ingestion_service.clear_knowledge_base") as clear:
        response = client.post("/setup")
    assert response.status_code == 200
    assert response.json()["entries_inserted"] == 5
    clear.assert_not_called()


def test_setup_unavailable_returns_503(client: TestClient) -> None:
    with patch(
        "app.services.ingestion_service.store_entries",
        side_effect=ServiceUnavailableError("MILVUS_URI and MILVUS_TOKEN must be set in .env"),
    ):
        response = client.post("/setup", json={"reset": False})
    assert response.status_code == 503
    assert "MILVUS_URI" in response.json()["detail"]


def test_status(client: TestClient) -> None:
    stats = {"collection_name": "question_answer", "total_entries": 5}
    with patch("app.api.handlers.get_collection_stats", return_value=stats):
        response = client.get("/status")
    assert response.status_code == 200
    assert response.json()["total_entries"] == 5


def test_test_chart_defaults(client: TestClient) -> None:
    response = client.post("/test/chart", json={})
    data = response.json()
    assert data["success"] is True
    assert data["chartConfig"]["type"] == "bar"
    assert data["message"] == "Generated bar chart for: Test Chart"


def test_test_rag(client: TestClient) -> None:
    outcome = RetrievalOutcome(ok=False, answer_text="I could not find relevant information in the database.")
    with patch("app.api.routes.answer_question", return_value=outcome):
        response = client.post("/test/rag", json={"query": "Unknown"})
    assert response.status_code == 200
    assert response.json()["ok"] is False
