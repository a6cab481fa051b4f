"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()

# Hugging Face (embeddings / inference)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()

# Vector collection: default embedding dim (e.g. sentence-transformers/all-MiniLM-L6-v2 = 384)
VECTOR_DIM: int = 384

# Milvus collection holding question/answer knowledge entries
COLLECTION_NAME: str = "question_answer"
HF_EMBED_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
EMBED_BATCH_SIZE: int = 32

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0

# Hugging Face chat (fallback LLM)
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"

# OpenAI (agent LLM). When set, the agent uses OpenAI instead of Hugging Face.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# HF LLM for agent (fallback when OPENAI_API_KEY is not set). Router chat completions require a chat model.
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)

LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7") or 0.7)
LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "1000") or 1000)

# Retrieval
RAG_RESULT_LIMIT: int = 3
MAX_KEYWORDS: int = 3
KEYWORD_STOP_WORDS: frozenset[str] = frozenset(
    {"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)

# Charts
CHART_KINDS: tuple[str, ...] = ("bar", "line", "pie", "doughnut", "radar")
DEFAULT_CHART_KIND: str = "bar"
DEFAULT_CHART_TITLE: str = "Data Visualization"

# Request validation
MAX_QUERY_LENGTH: int = 2000
