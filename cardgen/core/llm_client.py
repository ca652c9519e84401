"""LLM client for the generation pipeline.

A thin text-completion interface over the litellm Router:
- Message building
- Sampling parameters from LLMConfig
- Cost tracking integration
- Response diagnostics (length, preview, truncation warning)

The client returns raw text. JSON recovery and validation happen in the
orchestrator, which also owns retry and fallback between models. Provider
exceptions propagate unchanged so their status code and message reach the
failure classifier.

Usage:
    client = LLMClient(cost_tracker=tracker)
    text = await client.complete(
        prompt="...",
        model="gemini/gemini-3-flash-preview",
        generation_type="credit",
    )
"""

import logging

from litellm import Router

from cardgen.core.config import LLMConfig, RecoveryConfig
from cardgen.core.cost_tracker import CostTracker
from cardgen.core.errors import EmptyModelResponse
from cardgen.core.llm_router import router

logger = logging.getLogger(__name__)

# Suppress LiteLLM debug noise (done once at module load)
logging.getLogger("litellm").setLevel(logging.ERROR)
logging.getLogger("httpx").setLevel(logging.ERROR)
logging.getLogger("httpcore").setLevel(logging.ERROR)


class LLMClient:
    """Client for text completions through the litellm Router."""

    def __init__(self, cost_tracker: CostTracker | None = None, llm_router: Router | None = None) -> None:
        """Initialize the client.

        Args:
            cost_tracker: Optional tracker for recording token usage.
            llm_router: Router to call. Defaults to the module-level router
                        built from the configured model ladder.
        """
        self.cost_tracker = cost_tracker
        self.llm_router = llm_router

    async def complete(
        self,
        prompt: str,
        model: str,
        generation_type: str = "",
        temperature: float | None = None,
    ) -> str:
        """Send a single-message prompt and return the model's text.

        Args:
            prompt: Full prompt (instructions, schema and user data).
            model: litellm model identifier.
            generation_type: Record type, used for cost tracking.
            temperature: Sampling temperature. Defaults to LLMConfig.TEMPERATURE.

        Returns:
            The raw response text.

        Raises:
            EmptyModelResponse: If the model returned no text.
            litellm exceptions: For API errors (rate limits, auth, network).
        """
        active_router = self.llm_router or router
        response = await active_router.acompletion(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature if temperature is not None else LLMConfig.TEMPERATURE,
            top_p=LLMConfig.TOP_P,
            max_tokens=LLMConfig.MAX_OUTPUT_TOKENS,
        )

        if self.cost_tracker:
            self.cost_tracker.record(model, getattr(response, "usage", None), generation_type=generation_type)

        text = response.choices[0].message.content
        if not text:
            raise EmptyModelResponse(model)

        _log_response(model, text)
        return text


def _log_response(model: str, text: str):
    trimmed = text.strip()
    if not trimmed.endswith("}") and not trimmed.endswith("]"):
        logger.warning(
            f"Response from {model} might be truncated. "
            f"Last 100 chars: {trimmed[-100:]}"
        )

    logger.debug(f"Raw response ({model}) length: {len(text)}")
    logger.debug(f"Raw response (first {RecoveryConfig.PREVIEW_CHARS} chars): {text[:RecoveryConfig.PREVIEW_CHARS]}")
    if len(text) > RecoveryConfig.PREVIEW_CHARS:
        logger.debug(
            f"Raw response (last {RecoveryConfig.TAIL_PREVIEW_CHARS} chars): "
            f"{text[-RecoveryConfig.TAIL_PREVIEW_CHARS:]}"
        )
