"""
Unit tests for chart generation and the visualization handler.
"""

from unittest.mock import patch

import pytest

from app.core.config import CHART_KINDS
from app.services.chart_service import build_chart_config, generate_chart_data, generation_message, normalize_kind
from app.services.visualization_service import create_visualization, parse_chart_params


class TestBuildChartConfig:
    """Tests for build_chart_config()."""

    @pytest.mark.parametrize("kind", CHART_KINDS)
    def test_supported_kinds_keep_their_type(self, kind: str) -> None:
        config = build_chart_config(kind, "Title", "desc")
        assert config["type"] == kind
        assert config["data"]["labels"]
        assert config["data"]["datasets"]

    def test_title_and_display_options(self) -> None:
        config = build_chart_config("line", "Monthly Revenue", "revenue by month")
        plugins = config["options"]["plugins"]
        assert config["options"]["responsive"] is True
        assert plugins["title"] == {"display": True, "text": "Monthly Revenue", "font": {"size": 16, "weight": "bold"}}
        assert plugins["legend"] == {"display": True, "position": "top"}
        assert config["options"]["scales"] == {"y": {"beginAtZero": True}}

    @pytest.mark.parametrize("kind", ["pie", "doughnut"])
    def test_round_charts_have_no_scales(self, kind: str) -> None:
        assert "scales" not in build_chart_config(kind, "T", "d")["options"]

    def test_unknown_kind_renders_as_default_bar(self) -> None:
        config = build_chart_config("scatter", "T", "d")
        assert config["type"] == "bar"
        assert config["data"]["datasets"][0]["label"] == "Default Dataset"

    def test_is_deterministic_and_not_shared(self) -> None:
        first = generate_chart_data("bar", "sales")
        first["datasets"][0]["data"].append(99)
        assert generate_chart_data("bar", "sales")["datasets"][0]["data"] == [12, 19, 3, 5, 2, 3]

    def test_normalize_kind(self) -> None:
        assert normalize_kind(" Radar ") == "radar"
        assert normalize_kind(None) == "bar"

    def test_generation_message(self) -> None:
        assert generation_message("pie", "Market Share") == "Generated pie chart for: Market Share"


class TestParseChartParams:
    """Tests for parse_chart_params()."""

    def test_valid_json(self) -> None:
        params = parse_chart_params('{"chartType": "Line", "title": "Trend", "data": "monthly users"}', "q")
        assert (params.chart_kind, params.title, params.data_description) == ("line", "Trend", "monthly users")

    def test_code_fenced_json(self) -> None:
        raw = '```json\n{"chartType": "pie", "title": "Share", "data": "market share"}\n```'
        assert parse_chart_params(raw, "q").chart_kind == "pie"

    @pytest.mark.parametrize(
        "raw",
        [
            "Sure! Here is a bar chart.",
            "",
            '{"chartType": "pie", "title": "Share"}',
            '{"chartType": 3, "title": "T", "data": "d"}',
            '["bar", "T", "d"]',
        ],
    )
    def test_invalid_output_uses_defaults(self, raw: str) -> None:
        params = parse_chart_params(raw, "Create a bar chart showing sales data for Q1")
        assert params.chart_kind == "bar"
        assert params.title == "Data Visualization"
        assert params.data_description == "Create a bar chart showing sales data for Q1"


def test_create_visualization_success() -> None:
    raw = '{"chartType": "bar", "title": "Q1 Sales", "data": "sales per month in Q1"}'
    with patch("app.services.visualization_service.complete", return_value=raw):
        outcome = create_visualization("Create a bar chart showing sales data for Q1")
    assert outcome.ok is True
    assert outcome.chart_spec["type"] == "bar"
    assert outcome.chart_spec["options"]["plugins"]["title"]["text"] == "Q1 Sales"
    assert outcome.message == "Generated bar chart for: Q1 Sales"


def test_create_visualization_extraction_call_failure_uses_defaults() -> None:
    with patch("app.services.visualization_service.complete", side_effect=RuntimeError("timeout")):
        outcome = create_visualization("Plot something")
    assert outcome.ok is True
    assert outcome.message == "Generated bar chart for: Data Visualization"


def test_create_visualization_generation_failure() -> None:
    with patch("app.services.visualization_service.complete", return_value="not json"), \
         patch("app.services.visualization_service.build_chart_config", side_effect=KeyError("template")):
        outcome = create_visualization("Plot something")
    assert outcome.ok is False
    assert outcome.chart_spec is None
    assert "template" in outcome.error_detail
