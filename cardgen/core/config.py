"""Centralized configuration for the card data generation pipeline.

All model identifiers, sampling parameters and retry constants live here.
Each constant includes:
- What it controls
- Why this value was chosen
- What changing it affects
"""

import os
from typing import Final


# =============================================================================
# LLM Provider Configuration
# =============================================================================
#
# To switch providers, set the LLM_PROVIDER environment variable:
#   - "gemini" (default): Calls Google Gemini directly through litellm
#   - "openrouter": Routes the same Gemini models through OpenRouter
#
# Individual models can be overridden with:
#   - CARDGEN_FAST_MODEL
#   - CARDGEN_HIGH_CAPACITY_MODEL
#   - CARDGEN_HIGH_CAPACITY_FALLBACK_MODEL
#
# =============================================================================

LLM_PROVIDER: Final[str] = os.environ.get("LLM_PROVIDER", "gemini")
"""LLM provider to use. Set via LLM_PROVIDER env var.

Supported values:
- "gemini": Google AI Studio API (default)
- "openrouter": OpenRouter API gateway
"""

API_KEY_ENV_VARS: Final[dict[str, str]] = {
    "gemini": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

API_KEY_ENV_VAR: Final[str] = API_KEY_ENV_VARS.get(LLM_PROVIDER, "GEMINI_API_KEY")
"""Environment variable name for the LLM API key (provider-dependent)."""


# =============================================================================
# Model Configuration (Provider-Specific)
# =============================================================================

def _get_model_name(base_model: str, override_env: str) -> str:
    """Convert a base model name to a provider-specific litellm identifier.

    Args:
        base_model: Base model name (e.g., "gemini-2.5-pro").
        override_env: Environment variable that replaces the whole identifier.

    Returns:
        Provider-specific model identifier.
    """
    override = os.environ.get(override_env)
    if override:
        return override
    if LLM_PROVIDER == "openrouter":
        return f"openrouter/google/{base_model}"
    return f"gemini/{base_model}"


FAST_MODEL: Final[str] = _get_model_name("gemini-3-flash-preview", "CARDGEN_FAST_MODEL")
"""Cheap, low-latency model.

Used for single-component extraction (one credit, perk or multiplier) and for
every refinement. Refinements are small edits to output the user has already
seen, so they always stay on this model.
"""

HIGH_CAPACITY_MODEL: Final[str] = _get_model_name("gemini-3-pro-preview", "CARDGEN_HIGH_CAPACITY_MODEL")
"""Primary model for card extraction and batch extraction.

Card records have many fields, including brand color inference, and batch
extraction pulls many records out of one text blob. Both need more accuracy
than the fast tier delivers.
"""

HIGH_CAPACITY_FALLBACK_MODEL: Final[str] = _get_model_name(
    "gemini-2.5-pro", "CARDGEN_HIGH_CAPACITY_FALLBACK_MODEL"
)
"""Same-tier fallback tried when the primary high-capacity model is
rate limited or keeps returning unparseable output."""


# LLM Call Configuration

class LLMConfig:
    """Default sampling parameters for generation calls."""

    TEMPERATURE: Final[float] = 0.1
    """Low temperature keeps JSON output close to deterministic."""

    TOP_P: Final[float] = 0.8
    """Nucleus sampling cutoff."""

    MAX_OUTPUT_TOKENS: Final[int] = 8192
    """Upper bound on generated tokens.

    Large enough for a full card record or a batch of a dozen components.
    Responses that still hit the limit are handled by truncation recovery
    in json_recovery.py.
    """


# Retry Configuration

class RetryConfig:
    """Configuration for the orchestrator's retry loop.

    Retries are deliberately few: a higher-tier fallback model is the real
    recovery mechanism, not hammering the same one.
    """

    MAX_ATTEMPTS_PER_MODEL: Final[int] = 2
    """Attempts per model for parse-class failures before moving down the ladder."""

    BACKOFF_SECONDS: Final[float] = 0.5
    """Fixed delay between attempts on the same model. No jitter, no growth."""


# Recovery Parser Configuration

class RecoveryConfig:
    """Limits for diagnostic output produced while recovering JSON."""

    PREVIEW_CHARS: Final[int] = 500
    """Characters of the raw response logged at DEBUG level."""

    TAIL_PREVIEW_CHARS: Final[int] = 200
    """Characters from the end of long responses logged at DEBUG level."""

    ERROR_CONTEXT_CHARS: Final[int] = 100
    """Characters logged on each side of a JSON decode error position."""
