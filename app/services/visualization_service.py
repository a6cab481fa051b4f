"""
Visualization handler: extract chart parameters from the query and build a chart config.

Extraction problems fall back to default parameters; generation problems come back
as a VisualizationOutcome with ok=False. Never raises.
"""

import logging

from pydantic import ValidationError

from app.agent.llm import complete
from app.agent.prompts import EXTRACT_CHART_PARAMS
from app.core.config import DEFAULT_CHART_KIND, DEFAULT_CHART_TITLE
from app.schemas.outcomes import ChartParams, VisualizationOutcome
from app.services.chart_service import build_chart_config, generation_message

logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json ... ``` fence if the model added one."""
    out = text.strip()
    if out.startswith("```"):
        out = out.split("\n", 1)[1] if "\n" in out else ""
        if out.rstrip().endswith("```"):
            out = out.rstrip()[:-3]
    return out.strip()


def default_chart_params(query: str) -> ChartParams:
    return ChartParams(chart_kind=DEFAULT_CHART_KIND, title=DEFAULT_CHART_TITLE, data_description=query or "Data")


def parse_chart_params(raw: str, query: str) -> ChartParams:
    """Validate the model's JSON against ChartParams; any problem yields the defaults."""
    try:
        return ChartParams.model_validate_json(_strip_code_fence(raw))
    except ValidationError as e:
        logger.info("[viz:parse_chart_params] invalid params (%d errors); using defaults", e.error_count())
        return default_chart_params(query)


def extract_chart_params(query: str) -> ChartParams:
    try:
        raw = complete(EXTRACT_CHART_PARAMS, {"query": query})
    except Exception as e:
        logger.warning("[viz:extract_chart_params] extraction call failed: %s; using defaults", e)
        return default_chart_params(query)
    logger.info("[viz:extract_chart_params] llm_raw=%r", raw[:300])
    return parse_chart_params(raw, query)


def create_visualization(query: str) -> VisualizationOutcome:
    logger.info("[viz:create_visualization] IN  query=%r", query)
    params = extract_chart_params(query)
    logger.info("[viz:create_visualization] params kind=%s title=%r", params.chart_kind, params.title)
    try:
        chart_spec = build_chart_config(params.chart_kind, params.title, params.data_description)
        message = generation_message(params.chart_kind, params.title)
    except Exception as e:
        logger.exception("[viz:create_visualization] chart generation failed")
        return VisualizationOutcome(ok=False, error_detail=str(e))
    logger.info("[viz:create_visualization] OUT type=%s", chart_spec["type"])
    return VisualizationOutcome(ok=True, chart_spec=chart_spec, message=message)
