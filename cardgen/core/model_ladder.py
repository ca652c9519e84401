"""Model selection ladder.

Given the kind of extraction, returns the models to try in priority order.
The model identifiers are injected through a LadderTable so the selection
rules can be tested without any live model names.
"""

from dataclasses import dataclass

from cardgen.core.config import FAST_MODEL, HIGH_CAPACITY_FALLBACK_MODEL, HIGH_CAPACITY_MODEL
from cardgen.pydantic_models.generation import GenerationType


@dataclass(frozen=True)
class LadderTable:
    """Model tiers available to the ladder.

    Attributes:
        fast: Single cheap model used without fallback.
        high_capacity: Primary high-capacity model followed by its fallbacks.
    """

    fast: str
    high_capacity: tuple[str, ...]

    def __post_init__(self):
        if not self.high_capacity:
            raise ValueError("high_capacity tier needs at least one model")

    @classmethod
    def from_config(cls) -> "LadderTable":
        return cls(
            fast=FAST_MODEL,
            high_capacity=(HIGH_CAPACITY_MODEL, HIGH_CAPACITY_FALLBACK_MODEL),
        )

    @property
    def all_models(self) -> list[str]:
        """Every distinct model in the table, fast tier first."""
        models = [self.fast]
        for model in self.high_capacity:
            if model not in models:
                models.append(model)
        return models


class ModelLadder:
    """Chooses the ordered list of candidate models for a request."""

    def __init__(self, table: LadderTable | None = None):
        self.table = table or LadderTable.from_config()

    def select_models(
        self,
        generation_type: GenerationType,
        batch_mode: bool,
        is_refinement: bool,
    ) -> list[str]:
        """Return candidate models, first entry tried first.

        Rules, in priority order:
        - Refinements use the fast model only. A second model reinterprets
          the correction instruction too differently to act as a substitute.
        - Cards use the high-capacity tier (many fields, color inference).
        - Batch extraction uses the high-capacity tier.
        - A single component uses the fast model only.
        """
        if is_refinement:
            return [self.table.fast]
        if generation_type is GenerationType.CARD:
            return list(self.table.high_capacity)
        if batch_mode:
            return list(self.table.high_capacity)
        return [self.table.fast]
