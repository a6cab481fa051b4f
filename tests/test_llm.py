"""
Unit tests for the completion service and prompt rendering.
"""

from unittest.mock import patch

import pytest

from app.agent.llm import complete
from app.agent.prompts import CLASSIFY_INTENT, EXTRACT_CHART_PARAMS, PROMPT_TEMPLATES, render_prompt
from app.core.errors import CompletionError


class TestRenderPrompt:
    """Tests for render_prompt()."""

    def test_fills_variables(self) -> None:
        prompt = render_prompt(CLASSIFY_INTENT, {"query": "Hello there"})
        assert "User Query: Hello there" in prompt
        assert "chart, rag, both, direct" in prompt

    def test_literal_json_braces_survive(self) -> None:
        prompt = render_prompt(EXTRACT_CHART_PARAMS, {"query": "q"})
        assert '{"chartType": "line", "title": "Chart Title", "data": "Data description"}' in prompt

    def test_unknown_template(self) -> None:
        with pytest.raises(ValueError, match="Unknown prompt template"):
            render_prompt("nope", {})

    def test_missing_variable(self) -> None:
        with pytest.raises(KeyError):
            render_prompt(CLASSIFY_INTENT, {})

    def test_every_template_renders(self) -> None:
        variables = {"query": "q", "question": "q", "context": "c", "chart_info": "{}", "rag_info": "r"}
        for template_id in PROMPT_TEMPLATES:
            assert render_prompt(template_id, variables).strip()


def test_complete_uses_hf_without_openai_key() -> None:
    with patch("app.agent.llm.OPENAI_API_KEY", ""), \
         patch("app.agent.llm._call_hf", return_value="rag") as hf, \
         patch("app.agent.llm._call_openai") as openai_call:
        assert complete(CLASSIFY_INTENT, {"query": "What is ML?"}, max_new_tokens=10) == "rag"
    openai_call.assert_not_called()
    prompt, max_tokens = hf.call_args.args
    assert "What is ML?" in prompt
    assert max_tokens == 10


def test_complete_prefers_openai_when_configured() -> None:
    with patch("app.agent.llm.OPENAI_API_KEY", "sk-test"), \
         patch("app.agent.llm._call_openai", return_value="chart") as openai_call, \
         patch("app.agent.llm._call_hf") as hf:
        assert complete(CLASSIFY_INTENT, {"query": "Plot sales"}) == "chart"
    openai_call.assert_called_once()
    hf.assert_not_called()


def test_complete_raises_on_empty_response() -> None:
    with patch("app.agent.llm.OPENAI_API_KEY", "sk-test"), \
         patch("app.agent.llm._call_openai", return_value=""):
        with pytest.raises(CompletionError):
            complete(CLASSIFY_INTENT, {"query": "q"})


def test_hf_without_key_raises() -> None:
    with patch("app.agent.llm.OPENAI_API_KEY", ""), patch("app.agent.llm.HF_API_KEY", ""):
        with pytest.raises(CompletionError, match="No completion provider"):
            complete(CLASSIFY_INTENT, {"query": "q"})
