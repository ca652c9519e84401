"""Tests for cardgen.core.llm_client module.

Tests the LLMClient class with mocked router calls:
- complete(): request parameters and returned text
- Empty responses
- Cost tracking integration
- Provider errors propagate unchanged
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from cardgen.core.config import LLMConfig
from cardgen.core.cost_tracker import CostTracker
from cardgen.core.errors import EmptyModelResponse
from cardgen.core.llm_client import LLMClient


def _response(content, prompt_tokens=100, completion_tokens=50):
    return MagicMock(
        choices=[MagicMock(message=MagicMock(content=content))],
        usage=MagicMock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


# =============================================================================
# LLMClient tests
# =============================================================================


class TestLLMClient:
    """Tests for LLMClient.complete()."""

    @pytest.fixture
    def mock_router(self):
        """Mock the module-level litellm Router."""
        with patch("cardgen.core.llm_client.router") as mock:
            mock.acompletion = AsyncMock(return_value=_response('{"CardName": "Gold"}'))
            yield mock

    @pytest.mark.asyncio
    async def test_returns_raw_text(self, mock_router):
        text = await LLMClient().complete("Extract.", model="test-model")
        assert text == '{"CardName": "Gold"}'

    @pytest.mark.asyncio
    async def test_sends_single_user_message(self, mock_router):
        await LLMClient().complete("Extract this card.", model="test-model")

        kwargs = mock_router.acompletion.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [{"role": "user", "content": "Extract this card."}]

    @pytest.mark.asyncio
    async def test_uses_configured_sampling(self, mock_router):
        await LLMClient().complete("Extract.", model="test-model")

        kwargs = mock_router.acompletion.call_args.kwargs
        assert kwargs["temperature"] == LLMConfig.TEMPERATURE
        assert kwargs["top_p"] == LLMConfig.TOP_P
        assert kwargs["max_tokens"] == LLMConfig.MAX_OUTPUT_TOKENS

    @pytest.mark.asyncio
    async def test_temperature_override(self, mock_router):
        await LLMClient().complete("Extract.", model="test-model", temperature=0.0)
        assert mock_router.acompletion.call_args.kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", None])
    async def test_empty_response_raises(self, mock_router, content):
        mock_router.acompletion.return_value = _response(content)

        with pytest.raises(EmptyModelResponse) as exc_info:
            await LLMClient().complete("Extract.", model="test-model")

        assert exc_info.value.model == "test-model"

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, mock_router):
        error = RuntimeError("429 Too Many Requests")
        mock_router.acompletion.side_effect = error

        with pytest.raises(RuntimeError) as exc_info:
            await LLMClient().complete("Extract.", model="test-model")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_truncated_response_still_returned(self, mock_router):
        mock_router.acompletion.return_value = _response('{"a": "x", "b": "tru')
        text = await LLMClient().complete("Extract.", model="test-model")
        assert text == '{"a": "x", "b": "tru'

    @pytest.mark.asyncio
    async def test_records_cost(self, mock_router):
        tracker = CostTracker()
        await LLMClient(cost_tracker=tracker).complete(
            "Extract.", model="test-model", generation_type="credit",
        )

        assert tracker.call_count == 1
        call = tracker.calls[0]
        assert (call.model, call.prompt_tokens, call.completion_tokens) == ("test-model", 100, 50)
        assert call.generation_type == "credit"

    @pytest.mark.asyncio
    async def test_records_cost_before_empty_check(self, mock_router):
        mock_router.acompletion.return_value = _response("")
        tracker = CostTracker()

        with pytest.raises(EmptyModelResponse):
            await LLMClient(cost_tracker=tracker).complete("Extract.", model="test-model")

        assert tracker.call_count == 1

    @pytest.mark.asyncio
    async def test_injected_router_is_used(self, mock_router):
        own_router = MagicMock()
        own_router.acompletion = AsyncMock(return_value=_response("[]"))

        text = await LLMClient(llm_router=own_router).complete("Extract.", model="test-model")

        assert text == "[]"
        own_router.acompletion.assert_awaited_once()
        mock_router.acompletion.assert_not_awaited()
