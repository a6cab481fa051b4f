"""
API route aggregator: register endpoints; no logic; only delegate to handlers and the agent.
"""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.agent.graph import process_query, process_query_stream
from app.api.handlers import handle_setup, handle_status
from app.schemas.knowledge import SetupRequest, SetupResponse, StatusResponse
from app.schemas.outcomes import RetrievalOutcome
from app.schemas.query import ChartTestRequest, QueryRequest, QueryResponse
from app.services.chart_service import build_chart_config, generation_message
from app.services.rag_service import answer_question

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Query routing backend running"}


@router.get("/health", tags=["system"])
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {"agent": "initialized"},
    }


@router.get("/status", response_model=StatusResponse, tags=["system"], summary="Knowledge base status")
def get_status() -> StatusResponse:
    return handle_status()


# --- Knowledge base ---

@router.post(
    "/setup",
    response_model=SetupResponse,
    tags=["knowledge"],
    summary="Seed the knowledge base",
    description="Create the collection if missing and insert the sample question/answer entries. 503 if Milvus or embeddings are not configured.",
)
def post_setup(body: SetupRequest | None = None) -> SetupResponse:
    return handle_setup(body or SetupRequest())


# --- Query ---

@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Route a query to the chart and/or knowledge-base handlers",
    description="Send a query; receive answer, references, fileIds and chartConfig. 422 on empty input; failures come back as a polite answer.",
)
def post_query(body: QueryRequest) -> QueryResponse:
    logger.info("[api:post_query] IN  query=%r", body.query)
    response = process_query(body.query)
    logger.info("[api:post_query] OUT fileIds=%s chart=%s", response.source_ids, response.chart_spec is not None)
    return QueryResponse(query=body.query, response=response)


def _sse_generator(query: str):
    """Yield Server-Sent Events for the routing steps and the final answer."""
    for evt in process_query_stream(query):
        yield f"event: {evt['event']}\ndata: {json.dumps(evt['data'])}\n\n"


@router.post(
    "/query/stream",
    tags=["query"],
    summary="Route a query (SSE stream)",
    description="Stream routing progress via Server-Sent Events. Events: decision, step, answer, error.",
)
def post_query_stream(body: QueryRequest) -> StreamingResponse:
    logger.info("[api:post_query_stream] IN  query=%r", body.query)
    return StreamingResponse(
        _sse_generator(body.query),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# --- Component checks ---

@router.post("/test/chart", tags=["test"], summary="Generate a chart config directly")
def post_test_chart(body: ChartTestRequest) -> dict:
    chart_type = body.chartType or "bar"
    title = body.title or "Test Chart"
    chart_config = build_chart_config(chart_type, title, body.data or "Test data")
    return {"success": True, "chartConfig": chart_config, "message": generation_message(chart_type, title)}


@router.post("/test/rag", response_model=RetrievalOutcome, tags=["test"], summary="Run the knowledge-base handler directly")
def post_test_rag(body: QueryRequest) -> RetrievalOutcome:
    return answer_question(body.query)
