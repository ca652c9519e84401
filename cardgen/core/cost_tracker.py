"""Token and cost accounting for generation calls.

Callers use `GenerationResult.model_used` to see which tier answered; this
module records what each call actually consumed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Fallback pricing per 1M tokens (USD) when litellm has no entry for a model.
# (input_cost_per_1M, output_cost_per_1M)
_FALLBACK_PRICING: dict[str, tuple[float, float]] = {
    "gemini-3-pro-preview": (2.00, 12.00),
    "gemini-3-flash-preview": (0.50, 3.00),
    "gemini-2.5-pro": (1.25, 10.00),
    "gemini-2.5-flash": (0.30, 2.50),
}

_warned_models: set[str] = set()


def _base_model_name(model: str) -> str:
    """Strip routing prefixes: 'openrouter/google/gemini-2.5-pro' -> 'gemini-2.5-pro'."""
    return model.rsplit("/", 1)[-1]


def _fallback_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float | None:
    rates = _FALLBACK_PRICING.get(_base_model_name(model))
    if rates is None:
        return None
    input_rate, output_rate = rates
    return (prompt_tokens * input_rate + completion_tokens * output_rate) / 1_000_000


@dataclass
class CallUsage:
    """Usage for a single generation call."""

    model: str
    prompt_tokens: int
    completion_tokens: int
    generation_type: str = ""

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def cost(self) -> float:
        """Cost in USD from litellm's pricing database, else the fallback table."""
        try:
            from litellm import completion_cost
            return completion_cost(
                model=self.model,
                prompt_tokens=self.prompt_tokens,
                completion_tokens=self.completion_tokens,
            )
        except Exception:
            fallback = _fallback_cost(self.model, self.prompt_tokens, self.completion_tokens)
            if fallback is not None:
                return fallback
            if self.model not in _warned_models:
                _warned_models.add(self.model)
                logger.warning(f"No pricing available for model '{self.model}', cost will show as $0")
            return 0.0


@dataclass
class CostTracker:
    """Accumulates token usage across generation calls."""

    calls: list[CallUsage] = field(default_factory=list)

    def record(self, model: str, usage: Any, generation_type: str = "") -> CallUsage:
        """Record usage from a litellm response.

        Args:
            model: Model identifier the call was sent to.
            usage: The `usage` object of the response (may be None).
            generation_type: Record type being generated.
        """
        call = CallUsage(
            model=model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            generation_type=generation_type,
        )
        if usage is not None:
            self.calls.append(call)
        return call

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def total_prompt_tokens(self) -> int:
        return sum(c.prompt_tokens for c in self.calls)

    @property
    def total_completion_tokens(self) -> int:
        return sum(c.completion_tokens for c in self.calls)

    @property
    def total_tokens(self) -> int:
        return self.total_prompt_tokens + self.total_completion_tokens

    @property
    def total_cost(self) -> float:
        return sum(c.cost for c in self.calls)

    def by_model(self) -> dict[str, dict[str, Any]]:
        """Breakdown of calls, tokens and cost per model."""
        breakdown: dict[str, dict[str, Any]] = {}
        for call in self.calls:
            stats = breakdown.setdefault(
                call.model, {"calls": 0, "prompt_tokens": 0, "completion_tokens": 0, "cost": 0.0}
            )
            stats["calls"] += 1
            stats["prompt_tokens"] += call.prompt_tokens
            stats["completion_tokens"] += call.completion_tokens
            stats["cost"] += call.cost
        return breakdown

    def summary(self) -> str:
        """Formatted usage summary."""
        lines = [
            f"Calls: {self.call_count} | tokens: {self.total_tokens:,} "
            f"(prompt {self.total_prompt_tokens:,}, completion {self.total_completion_tokens:,}) "
            f"| cost: ${self.total_cost:.4f}",
        ]
        for model, stats in sorted(self.by_model().items()):
            lines.append(
                f"  {model}: {stats['calls']} calls, "
                f"{stats['prompt_tokens'] + stats['completion_tokens']:,} tokens, "
                f"${stats['cost']:.4f}"
            )
        return "\n".join(lines)
