"""
Base class for streaming chat completion clients.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass
class CompletionConfig:
    """Model settings for a completion request."""

    model: str
    temperature: float = 0.7


class StreamingLLMClient:
    """
    A language model that streams its answer to a single user prompt.

    Subclasses implement ``stream_completion``. Failures that happen before
    any output is produced must raise ``LLMError`` from the first iteration
    so callers can still answer with an error status.
    """

    provider_name = "llm"

    def __init__(self, config: CompletionConfig):
        self.config = config

    @property
    def model(self) -> str:
        return self.config.model

    def stream_completion(self, prompt: str) -> AsyncIterator[bytes]:
        """Stream the completion of ``prompt`` as UTF-8 text chunks."""
        raise NotImplementedError("Subclasses must implement stream_completion")
