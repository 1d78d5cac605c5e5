"""
Streaming language model clients.
"""

from itinerary_planner.config import ItineraryPlannerConfig, LLMProvider, config
from itinerary_planner.llm.base import CompletionConfig, StreamingLLMClient
from itinerary_planner.llm.streaming import (
    SSEDeltaDecoder,
    encode_deltas,
    extract_delta,
    iter_text_deltas,
)


def get_llm_client(cfg: ItineraryPlannerConfig | None = None) -> StreamingLLMClient:
    """Create the client for the configured provider."""
    cfg = cfg or config
    if cfg.llm.provider == LLMProvider.GEMINI:
        from itinerary_planner.llm.gemini import GeminiClient

        return GeminiClient(
            api_key=cfg.api.gemini_api_key,
            model=cfg.api.gemini_model,
            temperature=cfg.llm.temperature,
        )

    from itinerary_planner.llm.groq import GroqClient

    return GroqClient(
        api_key=cfg.api.groq_api_key,
        model=cfg.api.groq_model,
        temperature=cfg.llm.temperature,
        base_url=cfg.api.groq_base_url,
    )


__all__ = [
    "CompletionConfig",
    "SSEDeltaDecoder",
    "StreamingLLMClient",
    "encode_deltas",
    "extract_delta",
    "get_llm_client",
    "iter_text_deltas",
]
