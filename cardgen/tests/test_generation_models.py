"""Tests for cardgen.pydantic_models.generation module."""

import pytest
from pydantic import ValidationError

from cardgen.pydantic_models import (
    GeneratedField,
    GeneratedItem,
    GenerationRequest,
    GenerationResult,
    GenerationType,
)


class TestGenerationRequest:
    """Tests for request validation and derived flags."""

    def test_minimal(self):
        request = GenerationRequest(raw_data="text", generation_type="perk")
        assert request.generation_type is GenerationType.PERK
        assert request.batch_mode is False
        assert request.is_refinement is False

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(raw_data="text", generation_type="bonus")

    def test_refinement_prompt_without_previous_rejected(self):
        with pytest.raises(ValidationError, match="together"):
            GenerationRequest(raw_data="", generation_type="card", refinement_prompt="fix it")

    def test_previous_without_refinement_prompt_rejected(self):
        with pytest.raises(ValidationError, match="together"):
            GenerationRequest(raw_data="", generation_type="card", previous_output={"id": "x"})

    def test_object_refinement_keeps_batch_flag(self):
        request = GenerationRequest(
            raw_data="", generation_type="credit",
            refinement_prompt="fix", previous_output={"id": "x"},
        )
        assert request.is_refinement is True
        assert request.effective_batch_mode is False

    def test_array_refinement_is_batch(self):
        request = GenerationRequest(
            raw_data="", generation_type="credit",
            refinement_prompt="fix", previous_output=[{"id": "x"}],
        )
        assert request.effective_batch_mode is True


class TestResultTypes:
    """Tests for the wire shape of results."""

    def test_result_to_dict(self):
        item = GeneratedItem(
            fields=(GeneratedField("id", "ID", "x"),),
            json={"id": "x", "Perks": []},
        )
        result = GenerationResult(items=(item,), model_used="gemini/gemini-2.5-pro")

        assert result.to_dict() == {
            "items": [{
                "fields": [{"key": "id", "label": "ID", "value": "x"}],
                "json": {"id": "x", "Perks": []},
            }],
            "modelUsed": "gemini/gemini-2.5-pro",
        }

    def test_frozen(self):
        field = GeneratedField("id", "ID", "x")
        with pytest.raises(AttributeError):
            field.value = "y"
