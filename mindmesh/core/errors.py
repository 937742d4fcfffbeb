"""
Request-scoped error types. Mapped to HTTP responses in the app factory.
"""

from typing import Optional


class ConfigError(RuntimeError):
    """A required setting (API key, database URL, auth secret) is missing."""


class LLMError(RuntimeError):
    """Upstream LLM call failed: network error, non-2xx, or empty content."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
