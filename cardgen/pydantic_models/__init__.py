"""Data models for the generation pipeline.

Modules:
- generation: GenerationRequest (validated input) and the frozen result types
  GeneratedField, GeneratedItem, GenerationResult
"""

from cardgen.pydantic_models.generation import (
    FieldValue,
    GeneratedField,
    GeneratedItem,
    GenerationRequest,
    GenerationResult,
    GenerationType,
    JsonRecord,
)

__all__ = [
    "FieldValue",
    "GeneratedField",
    "GeneratedItem",
    "GenerationRequest",
    "GenerationResult",
    "GenerationType",
    "JsonRecord",
]
