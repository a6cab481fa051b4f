"""
Chart structure generator: Chart.js-style configuration per chart kind.

Pure and deterministic. The data description is accepted for future data binding;
series come from fixed per-kind sample templates.
"""

import copy
import logging

from app.core.config import CHART_KINDS, DEFAULT_CHART_KIND
from app.schemas.outcomes import ChartSpec

logger = logging.getLogger(__name__)

MONTHS = ["January", "February", "March", "April", "May", "June"]

_PALETTE = [
    (255, 99, 132),
    (54, 162, 235),
    (255, 206, 86),
    (75, 192, 192),
    (153, 102, 255),
    (255, 159, 64),
]


def _rgba(alpha: float) -> list[str]:
    return [f"rgba({r}, {g}, {b}, {alpha})" for r, g, b in _PALETTE]


_TEMPLATES: dict[str, dict] = {
    "line": {
        "labels": MONTHS,
        "datasets": [
            {
                "label": "Dataset 1",
                "data": [65, 59, 80, 81, 56, 55],
                "borderColor": "rgb(75, 192, 192)",
                "backgroundColor": "rgba(75, 192, 192, 0.2)",
                "tension": 0.1,
            },
            {
                "label": "Dataset 2",
                "data": [28, 48, 40, 19, 86, 27],
                "borderColor": "rgb(255, 99, 132)",
                "backgroundColor": "rgba(255, 99, 132, 0.2)",
                "tension": 0.1,
            },
        ],
    },
    "bar": {
        "labels": MONTHS,
        "datasets": [
            {
                "label": "Sales",
                "data": [12, 19, 3, 5, 2, 3],
                "backgroundColor": _rgba(0.2),
                "borderColor": _rgba(1),
                "borderWidth": 1,
            }
        ],
    },
    "pie": {
        "labels": ["Red", "Blue", "Yellow", "Green", "Purple", "Orange"],
        "datasets": [
            {
                "data": [12, 19, 3, 5, 2, 3],
                "backgroundColor": _rgba(0.8),
                "borderWidth": 2,
                "borderColor": "#fff",
            }
        ],
    },
    "radar": {
        "labels": ["Speed", "Reliability", "Comfort", "Safety", "Efficiency", "Durability"],
        "datasets": [
            {
                "label": "Product A",
                "data": [65, 59, 90, 81, 56, 55],
                "fill": True,
                "backgroundColor": "rgba(54, 162, 235, 0.2)",
                "borderColor": "rgb(54, 162, 235)",
                "pointBackgroundColor": "rgb(54, 162, 235)",
                "pointBorderColor": "#fff",
                "pointHoverBackgroundColor": "#fff",
                "pointHoverBorderColor": "rgb(54, 162, 235)",
            },
            {
                "label": "Product B",
                "data": [28, 48, 40, 19, 96, 27],
                "fill": True,
                "backgroundColor": "rgba(255, 99, 132, 0.2)",
                "borderColor": "rgb(255, 99, 132)",
                "pointBackgroundColor": "rgb(255, 99, 132)",
                "pointBorderColor": "#fff",
                "pointHoverBackgroundColor": "#fff",
                "pointHoverBorderColor": "rgb(255, 99, 132)",
            },
        ],
    },
}
_TEMPLATES["doughnut"] = _TEMPLATES["pie"]

_DEFAULT_TEMPLATE = {
    "labels": MONTHS,
    "datasets": [
        {
            "label": "Default Dataset",
            "data": [1, 2, 3, 4, 5, 6],
            "backgroundColor": "rgba(75, 192, 192, 0.2)",
            "borderColor": "rgb(75, 192, 192)",
            "borderWidth": 1,
        }
    ],
}


def normalize_kind(chart_kind: str | None) -> str:
    """Return the chart kind if supported, else the default bar kind."""
    kind = (chart_kind or "").strip().lower()
    return kind if kind in CHART_KINDS else DEFAULT_CHART_KIND


def generate_chart_data(chart_kind: str, data_description: str) -> dict:
    """Return {labels, datasets} for the chart kind; unknown kinds get the generic dataset."""
    template = _TEMPLATES.get((chart_kind or "").strip().lower(), _DEFAULT_TEMPLATE)
    return copy.deepcopy(template)


def build_chart_config(chart_kind: str, title: str, data_description: str) -> ChartSpec:
    """Wrap generated data with type, title and display options."""
    kind = normalize_kind(chart_kind)
    if kind != (chart_kind or "").strip().lower():
        logger.info("[chart:build_chart_config] unsupported kind %r; rendering as %s", chart_kind, kind)
    options: dict = {
        "responsive": True,
        "plugins": {
            "title": {
                "display": True,
                "text": title,
                "font": {"size": 16, "weight": "bold"},
            },
            "legend": {"display": True, "position": "top"},
        },
    }
    if kind not in ("pie", "doughnut"):
        options["scales"] = {"y": {"beginAtZero": True}}
    return {
        "type": kind,
        "data": generate_chart_data(chart_kind, data_description),
        "options": options,
    }


def generation_message(chart_kind: str, title: str) -> str:
    return f"Generated {normalize_kind(chart_kind)} chart for: {title}"
