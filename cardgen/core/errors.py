"""Error types for the generation pipeline.

Provides:
- Exception classes raised by the pipeline itself
- FailureClass, the recovery category assigned to any failed attempt
- AttemptFailure / AttemptLog records for diagnosing a failed run
"""

from dataclasses import dataclass, field
from enum import Enum


class FailureClass(Enum):
    """How the orchestrator recovers from a failed attempt."""
    RATE_LIMITED = "rate_limited"                  # Switch to the next model
    TRANSIENT_PARSE_FAILURE = "transient_parse"    # Retry, then switch model
    FATAL = "fatal"                                # Abort the run


class GenerationError(Exception):
    """Base class for errors raised by the pipeline."""


class ServiceNotConfigured(GenerationError):
    """The LLM API key is missing from the environment."""

    def __init__(self, env_var: str):
        super().__init__(f"{env_var} environment variable is not set")
        self.env_var = env_var


class ResponseParseError(GenerationError):
    """The model answered, but not with a usable record."""


class EmptyModelResponse(ResponseParseError):
    """The model returned no text."""

    def __init__(self, model: str):
        super().__init__(f"Empty response from model {model}")
        self.model = model


class JsonUnrecoverable(ResponseParseError):
    """Every recovery step failed to produce parseable JSON.

    Attributes:
        payload: The cleaned text the final parse was attempted on.
        position: Character offset of the decode error, if known.
    """

    def __init__(self, message: str, payload: str, position: int | None = None):
        super().__init__(message)
        self.payload = payload
        self.position = position


class MalformedResultShape(ResponseParseError):
    """Parsed JSON has the wrong shape for the requested mode."""


class AllModelsExhausted(GenerationError):
    """The model ladder ended without any attempt being made."""


@dataclass
class AttemptFailure:
    """A single failed model call or parse."""

    model: str
    attempt: int                   # 1-based attempt number on this model
    failure_class: FailureClass
    message: str
    original_error: Exception | None = None


@dataclass
class AttemptLog:
    """Failed attempts of one pipeline run, in order."""

    failures: list[AttemptFailure] = field(default_factory=list)

    def add(self, failure: AttemptFailure):
        self.failures.append(failure)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def models_tried(self) -> list[str]:
        seen: list[str] = []
        for failure in self.failures:
            if failure.model not in seen:
                seen.append(failure.model)
        return seen

    def summary(self) -> dict:
        """Get summary statistics."""
        by_class: dict[str, int] = {}
        for failure in self.failures:
            key = failure.failure_class.value
            by_class[key] = by_class.get(key, 0) + 1

        return {
            "failed_attempts": self.failure_count,
            "models_tried": self.models_tried,
            "failures_by_class": by_class,
        }
