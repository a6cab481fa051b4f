"""
Completion service: OpenAI (primary) or Hugging Face (fallback).
When OPENAI_API_KEY is set, uses OpenAI chat completions; otherwise uses HF router.

complete() is the single entry point the agent uses; it raises CompletionError
when no provider produced text so callers can tell failure from an answer.
"""

import logging

import httpx
from openai import OpenAI

from app.agent.prompts import render_prompt
from app.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from app.core.errors import CompletionError

logger = logging.getLogger(__name__)


def _call_openai(prompt: str, max_new_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    client = OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)
    response = client.chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=max_new_tokens,
        temperature=LLM_TEMPERATURE,
    )
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    out = (msg.content or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    logger.debug("[llm:openai] OUT response_full=%r", out)
    return out


def _call_hf(prompt: str, max_new_tokens: int) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    if not HF_API_KEY:
        raise CompletionError("No completion provider configured (set OPENAI_API_KEY or HF_API_KEY)")
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_new_tokens,
        "temperature": LLM_TEMPERATURE,
    }
    with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
        response = client.post(HF_CHAT_URL, json=payload, headers=headers)
    if response.status_code != 200:
        logger.warning("[llm:hf] HF LLM error %s: %s", response.status_code, response.text[:200])
        raise CompletionError(f"HF LLM error {response.status_code}")
    data = response.json()
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
        logger.info("[llm:hf] OUT response_len=%d", len(out))
        logger.debug("[llm:hf] OUT response_full=%r", out)
        return out
    return ""


def generate(prompt: str, max_new_tokens: int = LLM_MAX_TOKENS) -> str:
    """
    Call LLM for text generation. Uses OpenAI when OPENAI_API_KEY is set, else Hugging Face.
    Raises CompletionError (or the provider's own exception) when no text comes back.
    """
    logger.info("[llm] IN  prompt_len=%d max_new_tokens=%d", len(prompt), max_new_tokens)
    logger.debug("[llm] prompt_sample=%r", prompt[:500] if len(prompt) > 500 else prompt)
    out = _call_openai(prompt, max_new_tokens) if OPENAI_API_KEY else _call_hf(prompt, max_new_tokens)
    if not out:
        raise CompletionError("Completion provider returned an empty response")
    return out


def complete(template_id: str, variables: dict, max_new_tokens: int = LLM_MAX_TOKENS) -> str:
    """Render the prompt template with variables and return the generated text."""
    prompt = render_prompt(template_id, variables)
    logger.info("[llm:complete] template=%s prompt_len=%d", template_id, len(prompt))
    return generate(prompt, max_new_tokens=max_new_tokens)
