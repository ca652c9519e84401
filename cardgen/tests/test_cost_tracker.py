"""Tests for cardgen.core.cost_tracker module."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from cardgen.core.cost_tracker import CallUsage, CostTracker, _base_model_name


class TestCallUsage:
    """Tests for per-call cost."""

    def test_total_tokens(self):
        assert CallUsage("m", 10, 5).total_tokens == 15

    def test_uses_litellm_pricing(self):
        with patch("litellm.completion_cost", return_value=0.25):
            assert CallUsage("gemini/gemini-2.5-pro", 1000, 100).cost == 0.25

    def test_falls_back_to_pricing_table(self):
        with patch("litellm.completion_cost", side_effect=Exception("unknown model")):
            cost = CallUsage("openrouter/google/gemini-2.5-pro", 1_000_000, 0).cost
        assert cost == pytest.approx(1.25)

    def test_unknown_model_costs_zero(self):
        with patch("litellm.completion_cost", side_effect=Exception("unknown model")):
            assert CallUsage("mystery-model", 100, 100).cost == 0.0

    def test_base_model_name(self):
        assert _base_model_name("openrouter/google/gemini-3-pro-preview") == "gemini-3-pro-preview"


class TestCostTracker:
    """Tests for accumulation."""

    @pytest.fixture
    def tracker(self):
        tracker = CostTracker()
        tracker.record("pro-a", SimpleNamespace(prompt_tokens=100, completion_tokens=20), "card")
        tracker.record("pro-a", SimpleNamespace(prompt_tokens=50, completion_tokens=10), "card")
        tracker.record("fast-model", SimpleNamespace(prompt_tokens=30, completion_tokens=5), "credit")
        return tracker

    def test_totals(self, tracker):
        assert tracker.call_count == 3
        assert tracker.total_prompt_tokens == 180
        assert tracker.total_completion_tokens == 35
        assert tracker.total_tokens == 215

    def test_missing_usage_not_recorded(self):
        tracker = CostTracker()
        tracker.record("pro-a", None)
        assert tracker.call_count == 0

    def test_by_model(self, tracker):
        with patch("litellm.completion_cost", return_value=0.01):
            breakdown = tracker.by_model()
        assert breakdown["pro-a"]["calls"] == 2
        assert breakdown["pro-a"]["prompt_tokens"] == 150
        assert breakdown["fast-model"]["completion_tokens"] == 5

    def test_summary_lists_models(self, tracker):
        with patch("litellm.completion_cost", return_value=0.01):
            summary = tracker.summary()
        assert "Calls: 3" in summary
        assert "pro-a: 2 calls" in summary
