"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (vector store, embeddings, LLM)
is misconfigured or unreachable. Request-level failures (bad body, too many
requests) are mapped to 400/429 by the API layer.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. vector store, embeddings API) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RequestValidationFailed(Exception):
    """Raised when a request body does not match the expected shape."""

    def __init__(self, message: str, details: list | None = None) -> None:
        self.message = message
        self.details = details or []
        super().__init__(message)
