"""Prompt templates for the generation pipeline."""

from cardgen.prompts.extraction_prompt import (
    BASE_INSTRUCTIONS,
    CATEGORIES,
    SCHEMAS,
    build_generation_prompt,
    build_system_prompt,
    build_user_prompt,
    format_categories,
)

__all__ = [
    "BASE_INSTRUCTIONS",
    "CATEGORIES",
    "SCHEMAS",
    "build_generation_prompt",
    "build_system_prompt",
    "build_user_prompt",
    "format_categories",
]
