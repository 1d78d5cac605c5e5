"""
Groq chat completion client.

Groq exposes an OpenAI-compatible ``chat/completions`` endpoint; with
``stream: true`` it answers with server-sent events which are re-framed into
plain text here.
"""

from collections.abc import AsyncIterator

import aiohttp

from itinerary_planner.config import config
from itinerary_planner.llm.base import CompletionConfig, StreamingLLMClient
from itinerary_planner.llm.streaming import encode_deltas, iter_text_deltas
from itinerary_planner.utils.error_handling import LLMError
from itinerary_planner.utils.logging import get_logger
from itinerary_planner.utils.rate_limiting import APIClient

logger = get_logger(__name__)


async def raise_groq_error(response: aiohttp.ClientResponse) -> None:
    """
    Turn a failed Groq response into an LLMError.

    The message prefers the JSON ``error.message`` field, then the raw body,
    then just the status code.
    """
    error_message = f"Groq API error (status {response.status})"
    text = ""
    try:
        text = await response.text()
    except (aiohttp.ClientError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read Groq error body: {e!s}")

    detail = None
    if text:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            detail = body["error"].get("message")
        error_message = f"Groq API error: {detail or text}"

    logger.error(error_message)
    raise LLMError(error_message, upstream_status=response.status)


class GroqClient(StreamingLLMClient):
    """Streams itinerary completions from Groq Cloud."""

    provider_name = "groq"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        base_url: str | None = None,
    ):
        super().__init__(
            CompletionConfig(
                model=model or config.api.groq_model,
                temperature=(
                    temperature if temperature is not None else config.llm.temperature
                ),
            )
        )
        self.api_key = api_key if api_key is not None else config.api.groq_api_key
        self.client = APIClient(
            "groq",
            base_url or config.api.groq_base_url,
            api_key=self.api_key,
            timeout=config.system.http_timeout,
        )

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "stream": True,
        }

    async def stream_completion(self, prompt: str) -> AsyncIterator[bytes]:
        """
        Stream a completion as UTF-8 text chunks.

        Raises:
            LLMError: If Groq rejects the request
        """
        logger.debug(f"LLM Request: {self.config.model} - Temperature: {self.config.temperature}")
        async with self.client.stream_post(
            "chat/completions",
            json_data=self.build_payload(prompt),
            headers={"Content-Type": "application/json"},
            error_handler=raise_groq_error,
        ) as response:
            async for chunk in encode_deltas(iter_text_deltas(response.content.iter_any())):
                yield chunk
