"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (vector store, embeddings, LLM)
is misconfigured or unreachable so the API can return 503 with a user-facing message.
CompletionError and RetrievalError are raised by the collaborator layers and
absorbed at the handler boundaries; they never reach the transport from /query.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. vector store, embeddings API) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CompletionError(Exception):
    """Raised when the completion provider fails or returns no text."""


class RetrievalError(Exception):
    """Raised when every tier of the knowledge-base search failed."""
