"""Tests for cardgen.prompts module.

Tests:
- System prompt variants per generation type and mode
- User prompt for extraction and refinement
- Full prompt assembly
"""

import json

import pytest

from cardgen.prompts import (
    SCHEMAS,
    build_generation_prompt,
    build_system_prompt,
    build_user_prompt,
    format_categories,
)
from cardgen.pydantic_models import GenerationRequest, GenerationType


class TestSystemPrompt:
    """Tests for build_system_prompt()."""

    @pytest.mark.parametrize("generation_type", list(GenerationType))
    def test_contains_schema(self, generation_type):
        prompt = build_system_prompt(generation_type)
        assert json.dumps(SCHEMAS[generation_type], indent=2) in prompt

    def test_single_mode_asks_for_object(self):
        prompt = build_system_prompt(GenerationType.CREDIT)
        assert "output a JSON object" in prompt
        assert "JSON ARRAY" not in prompt

    @pytest.mark.parametrize("generation_type, heading", [
        (GenerationType.CREDIT, "CRITICAL - ONLY EXTRACT CREDITS"),
        (GenerationType.PERK, "CRITICAL - ONLY EXTRACT PERKS"),
        (GenerationType.MULTIPLIER, "CRITICAL - ONLY EXTRACT MULTIPLIERS"),
    ])
    def test_batch_mode_asks_for_array(self, generation_type, heading):
        prompt = build_system_prompt(generation_type, batch_mode=True)
        assert "JSON ARRAY" in prompt
        assert heading in prompt
        assert "return an empty array: []" in prompt

    def test_card_ignores_batch_mode(self):
        assert build_system_prompt(GenerationType.CARD, batch_mode=True) == build_system_prompt(GenerationType.CARD)

    def test_includes_categories(self):
        assert format_categories() in build_system_prompt(GenerationType.PERK)


class TestUserPrompt:
    """Tests for build_user_prompt()."""

    def test_extraction(self):
        request = GenerationRequest(raw_data="$300 travel credit", generation_type=GenerationType.CREDIT)
        prompt = build_user_prompt(request)
        assert prompt.endswith("$300 travel credit")
        assert "Previous output" not in prompt

    def test_object_refinement(self):
        request = GenerationRequest(
            raw_data="",
            generation_type=GenerationType.CARD,
            refinement_prompt="Annual fee is $95",
            previous_output={"AnnualFee": 0},
        )
        prompt = build_user_prompt(request)
        assert '"AnnualFee": 0' in prompt
        assert "Refinement instructions: Annual fee is $95" in prompt
        assert prompt.endswith("Output ONLY the updated JSON object.")

    def test_array_refinement(self):
        request = GenerationRequest(
            raw_data="",
            generation_type=GenerationType.PERK,
            refinement_prompt="Drop the second perk",
            previous_output=[{"id": "a"}, {"id": "b"}],
        )
        assert build_user_prompt(request).endswith("Output ONLY the updated JSON array.")


class TestGenerationPrompt:
    """Tests for build_generation_prompt()."""

    def test_joins_system_and_user(self):
        request = GenerationRequest(raw_data="3X on dining", generation_type=GenerationType.MULTIPLIER)
        prompt = build_generation_prompt(request)
        assert prompt.startswith(build_system_prompt(GenerationType.MULTIPLIER))
        assert prompt.endswith(build_user_prompt(request))

    def test_array_refinement_uses_batch_instructions(self):
        request = GenerationRequest(
            raw_data="",
            generation_type=GenerationType.CREDIT,
            refinement_prompt="Monthly values",
            previous_output=[{"id": "a"}],
        )
        assert "JSON ARRAY" in build_generation_prompt(request)
