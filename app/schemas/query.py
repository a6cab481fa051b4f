"""Schemas for the query endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import MAX_QUERY_LENGTH
from app.schemas.outcomes import ChartSpec


class QueryRequest(BaseModel):
    """Request body for POST /query and POST /query/stream."""

    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1, max_length=MAX_QUERY_LENGTH, description="Natural-language request.")


class FinalResponse(BaseModel):
    """
    Final answer for one query. Serialized with the wire names existing callers
    expect: answer, references, fileIds, chartConfig.
    """

    model_config = ConfigDict(populate_by_name=True)

    answer_text: str = Field(..., alias="answer", description="Natural-language answer.")
    source_references: dict[str, Any] = Field(
        default_factory=dict, alias="references", description='e.g. {"ragSources": ["file_001"]}'
    )
    source_ids: list[str] = Field(default_factory=list, alias="fileIds", description="Knowledge-base entry ids used.")
    chart_spec: ChartSpec | None = Field(None, alias="chartConfig", description="Chart configuration, if one was generated.")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class QueryResponse(BaseModel):
    """Response for POST /query."""

    success: bool = True
    query: str
    response: FinalResponse

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": True,
                    "query": "What is machine learning?",
                    "response": {
                        "answer": "Machine learning is a subset of AI ...",
                        "references": {"ragSources": ["file_001"]},
                        "fileIds": ["file_001"],
                        "chartConfig": None,
                    },
                }
            ]
        }
    }


class ChartTestRequest(BaseModel):
    """Request body for POST /test/chart."""

    chartType: str | None = None
    title: str | None = None
    data: str | None = None
