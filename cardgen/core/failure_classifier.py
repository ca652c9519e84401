"""Assigns a FailureClass to any exception raised during an attempt.

Classification is an ordered table of predicates; the first match wins.
Rate limits are checked first because they call for a different recovery
(switch model) than parse failures (retry the same model), and provider
messages sometimes mention both.
"""

import json
from collections.abc import Callable

from cardgen.core.errors import FailureClass, ResponseParseError

RATE_LIMIT_MARKERS: tuple[str, ...] = (
    "429",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
    "rate limit",
)

PARSE_MARKERS: tuple[str, ...] = ("json", "parse")


def _message(error: BaseException) -> str:
    return str(error).lower()


def _is_rate_limited(error: BaseException) -> bool:
    # litellm exceptions expose the HTTP status directly
    if getattr(error, "status_code", None) == 429:
        return True
    message = _message(error)
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def _is_parse_failure(error: BaseException) -> bool:
    if isinstance(error, (ResponseParseError, json.JSONDecodeError)):
        return True
    message = _message(error)
    return any(marker in message for marker in PARSE_MARKERS)


_RULES: tuple[tuple[FailureClass, Callable[[BaseException], bool]], ...] = (
    (FailureClass.RATE_LIMITED, _is_rate_limited),
    (FailureClass.TRANSIENT_PARSE_FAILURE, _is_parse_failure),
)


def classify(error: BaseException) -> FailureClass:
    """Classify a failed attempt.

    Args:
        error: Exception raised by the LLM client, the recovery parser or
            the projector.

    Returns:
        The first matching FailureClass, or FATAL if no rule matches.
    """
    for failure_class, matches in _RULES:
        if matches(error):
            return failure_class
    return FailureClass.FATAL
