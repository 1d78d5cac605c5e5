"""
Gemini chat completion client.

Alternative itinerary backend using the Google Gen AI SDK streaming API.
"""

from collections.abc import AsyncIterator

from google import genai
from google.genai import errors, types

from itinerary_planner.config import config
from itinerary_planner.llm.base import CompletionConfig, StreamingLLMClient
from itinerary_planner.utils.error_handling import LLMError
from itinerary_planner.utils.logging import get_logger
from itinerary_planner.utils.rate_limiting import rate_limit_manager

logger = get_logger(__name__)


class GeminiClient(StreamingLLMClient):
    """Streams itinerary completions from Gemini."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ):
        super().__init__(
            CompletionConfig(
                model=model or config.api.gemini_model,
                temperature=(
                    temperature if temperature is not None else config.llm.temperature
                ),
            )
        )
        self.api_key = api_key if api_key is not None else config.api.gemini_api_key
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def stream_completion(self, prompt: str) -> AsyncIterator[bytes]:
        """
        Stream a completion as UTF-8 text chunks.

        Raises:
            LLMError: If Gemini rejects the request
        """
        await rate_limit_manager.wait_if_needed(self.provider_name)
        logger.debug(f"LLM Request: {self.config.model} - Temperature: {self.config.temperature}")
        try:
            stream = await self.client.aio.models.generate_content_stream(
                model=self.config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.config.temperature
                ),
            )
        except errors.APIError as e:
            message = f"Gemini API error: {e.message or e!s}"
            logger.error(message)
            raise LLMError(message, upstream_status=e.code, original_error=e) from e

        async for chunk in stream:
            if chunk.text:
                yield chunk.text.encode("utf-8")
