"""Request and result models for structured data generation.

GenerationRequest is validated with pydantic because it arrives from an
outer layer. The result types are frozen dataclasses: they are built once per
successful run and never mutated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

JsonRecord = dict[str, Any]
FieldValue = str | int | float | bool | None


class GenerationType(str, Enum):
    """Kind of record to extract. Selects the prompt schema and model ladder."""

    CARD = "card"
    CREDIT = "credit"
    PERK = "perk"
    MULTIPLIER = "multiplier"


class GenerationRequest(BaseModel):
    """Input to one pipeline run.

    Attributes:
        raw_data: Unstructured text pasted by the user.
        generation_type: Which record type to extract.
        batch_mode: Extract an array of records instead of a single one.
        refinement_prompt: Natural-language correction of a previous output.
        previous_output: The output being refined (object or array of objects).
    """

    raw_data: str
    generation_type: GenerationType
    batch_mode: bool = False
    refinement_prompt: str | None = None
    previous_output: JsonRecord | list[JsonRecord] | None = Field(default=None)

    @model_validator(mode="after")
    def _refinement_fields_paired(self) -> "GenerationRequest":
        if (self.refinement_prompt is None) != (self.previous_output is None):
            raise ValueError(
                "refinement_prompt and previous_output must be given together"
            )
        return self

    @property
    def is_refinement(self) -> bool:
        return self.refinement_prompt is not None and self.previous_output is not None

    @property
    def effective_batch_mode(self) -> bool:
        """Batch flag after accounting for batch refinements.

        Refining an array of records is a batch run even if the caller left
        batch_mode unset.
        """
        if self.is_refinement and isinstance(self.previous_output, list):
            return True
        return self.batch_mode


@dataclass(frozen=True)
class GeneratedField:
    """One displayable scalar property of an extracted record."""

    key: str
    label: str
    value: FieldValue

    def to_dict(self) -> dict:
        return {"key": self.key, "label": self.label, "value": self.value}


@dataclass(frozen=True)
class GeneratedItem:
    """An extracted record plus its display projection.

    `json` is authoritative; `fields` only lists its scalar properties.
    """

    fields: tuple[GeneratedField, ...]
    json: JsonRecord = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "json": self.json,
        }


@dataclass(frozen=True)
class GenerationResult:
    """Successful pipeline output.

    Attributes:
        items: Extracted records in model output order.
        model_used: Ladder rung that produced the records.
    """

    items: tuple[GeneratedItem, ...]
    model_used: str

    def to_dict(self) -> dict:
        """Convert to the camelCase wire shape used by the admin API."""
        return {
            "items": [item.to_dict() for item in self.items],
            "modelUsed": self.model_used,
        }
