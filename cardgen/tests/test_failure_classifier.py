"""Tests for cardgen.core.failure_classifier module.

Tests classify() across:
- Rate-limit markers and HTTP status codes
- Parse failures by type and by message
- Fallthrough to FATAL
- Rule precedence
"""

import json

import pytest

from cardgen.core.errors import (
    EmptyModelResponse,
    FailureClass,
    JsonUnrecoverable,
    MalformedResultShape,
)
from cardgen.core.failure_classifier import classify


class StatusError(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Rate limit tests
# =============================================================================


class TestRateLimited:
    """Tests for rate-limit detection."""

    @pytest.mark.parametrize("message", [
        "Error 429 from provider",
        "RESOURCE_EXHAUSTED: quota exceeded",
        "Resource exhausted for model",
        "Too Many Requests",
        "Rate limit reached for requests",
    ])
    def test_message_markers(self, message):
        assert classify(Exception(message)) is FailureClass.RATE_LIMITED

    def test_status_code_429(self):
        assert classify(StatusError("quota", 429)) is FailureClass.RATE_LIMITED

    def test_other_status_code_is_not_rate_limit(self):
        assert classify(StatusError("unauthorized", 401)) is FailureClass.FATAL

    def test_rate_limit_wins_over_parse_markers(self):
        error = Exception("429: could not parse quota response as JSON")
        assert classify(error) is FailureClass.RATE_LIMITED


# =============================================================================
# Parse failure tests
# =============================================================================


class TestParseFailure:
    """Tests for parse-class detection."""

    def test_json_unrecoverable(self):
        error = JsonUnrecoverable("Failed to parse AI response as JSON", payload="x")
        assert classify(error) is FailureClass.TRANSIENT_PARSE_FAILURE

    def test_empty_response_by_type(self):
        assert classify(EmptyModelResponse("pro-a")) is FailureClass.TRANSIENT_PARSE_FAILURE

    def test_malformed_shape_by_type(self):
        assert classify(MalformedResultShape("array")) is FailureClass.TRANSIENT_PARSE_FAILURE

    def test_json_decode_error(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{")
        assert classify(exc_info.value) is FailureClass.TRANSIENT_PARSE_FAILURE

    @pytest.mark.parametrize("message", ["Invalid JSON in body", "Could not PARSE output"])
    def test_message_markers(self, message):
        assert classify(ValueError(message)) is FailureClass.TRANSIENT_PARSE_FAILURE


# =============================================================================
# Fatal tests
# =============================================================================


class TestFatal:
    """Anything unmatched is fatal."""

    @pytest.mark.parametrize("error", [
        PermissionError("Invalid API key"),
        ConnectionError("connection reset by peer"),
        RuntimeError(""),
    ])
    def test_unmatched_errors(self, error):
        assert classify(error) is FailureClass.FATAL
