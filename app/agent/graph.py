"""
LangGraph orchestrator: classify → route → (visualize | retrieve | direct reply) → combine.

"both" runs visualization first; the retrieval it still needs is run by the
combine step, so each handler executes at most once per query.
process_query never raises: every failure ends as a polite FinalResponse.
"""

import json
import logging
import operator
from typing import Annotated, Literal, TypedDict

from langgraph.graph import END, StateGraph

from app.agent.llm import complete
from app.agent.prompts import CLASSIFY_INTENT, COMBINE_RESULTS, DIRECT_REPLY
from app.schemas.outcomes import Decision, RetrievalOutcome, VisualizationOutcome
from app.schemas.query import FinalResponse
from app.services.rag_service import answer_question
from app.services.visualization_service import create_visualization

logger = logging.getLogger(__name__)

COMBINE_FALLBACK = "I encountered an error processing your request."
STEP_ERROR = "I encountered an error while processing your request."
QUERY_ERROR = "I encountered an error while processing your query."
NO_RESPONSE = "No response generated."


class RoutingState(TypedDict):
    query: str
    decision: Decision | None
    visualization_result: VisualizationOutcome | None
    retrieval_result: RetrievalOutcome | None
    final_response: FinalResponse | None
    trace: Annotated[list[str], operator.add]


def resolve_decision(raw: str) -> Decision:
    """Map the classifier's text to a Decision; anything unrecognized means rag."""
    text = (raw or "").strip().lower()
    try:
        return Decision(text)
    except ValueError:
        logger.info("[graph:resolve_decision] unrecognized %r -> rag", text[:50])
        return Decision.RAG


def _error_response(message: str) -> FinalResponse:
    return FinalResponse(answer_text=message, source_references={}, source_ids=[], chart_spec=None)


def _classify_query(state: RoutingState) -> dict:
    """Node 1: ask the LLM for exactly one of chart / rag / both / direct."""
    query = state["query"]
    logger.info("[graph:classify_query] IN  query=%r", query)
    try:
        raw = complete(CLASSIFY_INTENT, {"query": query}, max_new_tokens=10)
    except Exception as e:
        logger.warning("[graph:classify_query] classification call failed: %s", e)
        raw = ""
    logger.info("[graph:classify_query] llm_raw=%r", raw)
    decision = resolve_decision(raw)
    logger.info("[graph:classify_query] OUT decision=%s", decision.value)
    return {"decision": decision, "trace": [f"classify:{decision.value}"]}


def _route_decision(state: RoutingState) -> Literal["visualize", "retrieve", "direct_reply"]:
    """chart and both start with visualization; rag goes to retrieval; anything else replies directly."""
    decision = state.get("decision")
    if decision in (Decision.CHART, Decision.BOTH):
        next_node = "visualize"
    elif decision == Decision.RAG:
        next_node = "retrieve"
    else:
        next_node = "direct_reply"
    logger.info("[graph:route_decision] decision=%s -> %s", decision, next_node)
    return next_node


def _visualize(state: RoutingState) -> dict:
    """Node 2a: visualization handler."""
    outcome = create_visualization(state["query"])
    status = "ok" if outcome.ok else "failed"
    logger.info("[graph:visualize] OUT %s", status)
    return {"visualization_result": outcome, "trace": [f"visualize:{status}"]}


def _retrieve(state: RoutingState) -> dict:
    """Node 2b: RAG handler."""
    outcome = answer_question(state["query"])
    status = "ok" if outcome.ok else "failed"
    logger.info("[graph:retrieve] OUT %s sources=%s", status, outcome.source_ids)
    return {"retrieval_result": outcome, "trace": [f"retrieve:{status}"]}


def _direct_reply(state: RoutingState) -> dict:
    """Node 2c: answer without tools. Terminal."""
    query = state["query"]
    try:
        answer = complete(DIRECT_REPLY, {"query": query})
        response = FinalResponse(answer_text=answer, source_references={}, source_ids=[], chart_spec=None)
    except Exception:
        logger.exception("[graph:direct_reply] direct reply failed")
        response = _error_response(STEP_ERROR)
    logger.info("[graph:direct_reply] OUT answer_len=%d", len(response.answer_text))
    return {"final_response": response, "trace": ["direct_reply"]}


def _chart_summary(outcome: VisualizationOutcome) -> str:
    spec = outcome.chart_spec or {}
    title = ((spec.get("options") or {}).get("plugins") or {}).get("title") or {}
    return json.dumps({"success": outcome.ok, "type": spec.get("type"), "title": title.get("text"), "message": outcome.message})


def _combine_results(state: RoutingState) -> dict:
    """Node 3: run the deferred retrieval for "both", then merge outcomes into the final response."""
    query = state["query"]
    viz = state.get("visualization_result")
    rag = state.get("retrieval_result")
    update: dict = {"trace": []}
    try:
        if state.get("decision") == Decision.BOTH and rag is None:
            logger.info("[graph:combine_results] running deferred retrieval")
            rag = answer_question(query)
            update["retrieval_result"] = rag
            update["trace"].append(f"retrieve:{'ok' if rag.ok else 'failed'}")

        viz_ok = viz is not None and viz.ok
        rag_ok = rag is not None and rag.ok
        logger.info("[graph:combine_results] IN  viz_ok=%s rag_ok=%s", viz_ok, rag_ok)

        if viz_ok and rag_ok:
            answer = complete(
                COMBINE_RESULTS,
                {"query": query, "chart_info": _chart_summary(viz), "rag_info": rag.answer_text},
            )
        elif rag_ok:
            answer = rag.answer_text
        elif viz_ok:
            answer = viz.message
        else:
            answer = COMBINE_FALLBACK

        source_ids = list(rag.source_ids) if rag_ok else []
        response = FinalResponse(
            answer_text=answer or COMBINE_FALLBACK,
            source_references={"ragSources": source_ids} if rag_ok else {},
            source_ids=source_ids,
            chart_spec=viz.chart_spec if viz_ok else None,
        )
    except Exception:
        logger.exception("[graph:combine_results] combination failed")
        response = _error_response(STEP_ERROR)

    update["trace"].append("combine_results")
    update["final_response"] = response
    logger.info("[graph:combine_results] OUT answer_len=%d sources=%s chart=%s",
                len(response.answer_text), response.source_ids, response.chart_spec is not None)
    return update


def build_graph():
    """
    Build and compile the routing graph.
    classify → (visualize | retrieve) → combine → END, or classify → direct_reply → END.
    """
    graph = StateGraph(RoutingState)

    graph.add_node("classify_query", _classify_query)
    graph.add_node("visualize", _visualize)
    graph.add_node("retrieve", _retrieve)
    graph.add_node("direct_reply", _direct_reply)
    graph.add_node("combine_results", _combine_results)

    graph.set_entry_point("classify_query")
    graph.add_conditional_edges(
        "classify_query",
        _route_decision,
        {"visualize": "visualize", "retrieve": "retrieve", "direct_reply": "direct_reply"},
    )
    graph.add_edge("visualize", "combine_results")
    graph.add_edge("retrieve", "combine_results")
    graph.add_edge("combine_results", END)
    graph.add_edge("direct_reply", END)

    return graph.compile()


def _initial_state(query: str) -> RoutingState:
    return {
        "query": query,
        "decision": None,
        "visualization_result": None,
        "retrieval_result": None,
        "final_response": None,
        "trace": [],
    }


def run_routing(query: str) -> RoutingState:
    """Run the graph once and return the final routing state (may raise)."""
    graph = build_graph()
    return graph.invoke(_initial_state(query))


def process_query(query: str) -> FinalResponse:
    """Route one query end to end. Never raises."""
    logger.info("[process_query] START query=%r", query)
    try:
        final = run_routing(query)
    except Exception:
        logger.exception("[process_query] routing graph failed")
        return _error_response(QUERY_ERROR)
    response = final.get("final_response") or _error_response(NO_RESPONSE)
    logger.info("[process_query] END trace=%s answer_len=%d", final.get("trace"), len(response.answer_text))
    return response


def process_query_stream(query: str):
    """
    Run the graph and yield streaming events as steps complete.
    Each yield is {"event": "decision" | "step" | "answer" | "error", "data": ...};
    "answer" carries the serialized final response.
    """
    logger.info("[process_query_stream] START query=%r", query)
    graph = build_graph()
    try:
        for event in graph.stream(_initial_state(query)):
            # event: node name -> state update, e.g. {"classify_query": {"decision": ..., "trace": [...]}}
            for node_name, state_update in event.items():
                if node_name == "classify_query":
                    yield {"event": "decision", "data": state_update["decision"].value}
                    continue
                for label in state_update.get("trace", []):
                    yield {"event": "step", "data": label}
                if state_update.get("final_response") is not None:
                    yield {"event": "answer", "data": state_update["final_response"].to_wire()}
    except Exception as e:
        logger.exception("[process_query_stream] routing graph failed")
        yield {"event": "error", "data": str(e)}
        yield {"event": "answer", "data": _error_response(QUERY_ERROR).to_wire()}
    logger.info("[process_query_stream] END")
