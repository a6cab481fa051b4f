"""Typed results passed between the orchestrator and its handlers."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Chart.js-style configuration: {type, data: {labels, datasets}, options}
ChartSpec = dict[str, Any]


class Decision(str, Enum):
    """Routing decision resolved from the classification step."""

    CHART = "chart"
    RAG = "rag"
    BOTH = "both"
    DIRECT = "direct"


class ChartParams(BaseModel):
    """Chart parameters extracted from the user query by the LLM."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    chart_kind: str = Field(..., min_length=1, alias="chartType")
    title: str = Field(..., min_length=1)
    data_description: str = Field(..., min_length=1, alias="data")

    @field_validator("chart_kind")
    @classmethod
    def _lower_kind(cls, value: str) -> str:
        return value.lower()


class KnowledgeEntry(BaseModel):
    """One question/answer record from the knowledge base."""

    id: str
    question: str = ""
    answer: str = ""
    score: float | None = None


class VisualizationOutcome(BaseModel):
    ok: bool
    chart_spec: ChartSpec | None = None
    message: str | None = None
    error_detail: str | None = None


class RetrievalOutcome(BaseModel):
    ok: bool
    answer_text: str | None = None
    source_ids: list[str] = Field(default_factory=list)
    error_detail: str | None = None
