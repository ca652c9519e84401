"""Core utilities for the generation pipeline."""

from cardgen.core.config import (
    LLM_PROVIDER,
    API_KEY_ENV_VAR,
    API_KEY_ENV_VARS,
    FAST_MODEL,
    HIGH_CAPACITY_MODEL,
    HIGH_CAPACITY_FALLBACK_MODEL,
    LLMConfig,
    RetryConfig,
    RecoveryConfig,
)
from cardgen.core.errors import (
    FailureClass,
    GenerationError,
    ServiceNotConfigured,
    ResponseParseError,
    EmptyModelResponse,
    JsonUnrecoverable,
    MalformedResultShape,
    AllModelsExhausted,
    AttemptFailure,
    AttemptLog,
)
from cardgen.core.failure_classifier import classify
from cardgen.core.model_ladder import LadderTable, ModelLadder
from cardgen.core.json_recovery import (
    JsonScanner,
    RepairOutcome,
    extract_json,
    load_json,
    locate_span,
    repair_span,
    strip_code_fences,
)
from cardgen.core.projector import FIELD_LABELS, label_for, project, record_to_fields
from cardgen.core.cost_tracker import CallUsage, CostTracker
from cardgen.core.llm_client import LLMClient
from cardgen.core.pipeline_logger import GenerationLogger, RunContext, get_logger, reset_logger

__all__ = [
    # Configuration
    "LLM_PROVIDER",
    "API_KEY_ENV_VAR",
    "API_KEY_ENV_VARS",
    "FAST_MODEL",
    "HIGH_CAPACITY_MODEL",
    "HIGH_CAPACITY_FALLBACK_MODEL",
    "LLMConfig",
    "RetryConfig",
    "RecoveryConfig",
    # Errors
    "FailureClass",
    "GenerationError",
    "ServiceNotConfigured",
    "ResponseParseError",
    "EmptyModelResponse",
    "JsonUnrecoverable",
    "MalformedResultShape",
    "AllModelsExhausted",
    "AttemptFailure",
    "AttemptLog",
    "classify",
    # Model selection
    "LadderTable",
    "ModelLadder",
    # JSON recovery
    "JsonScanner",
    "RepairOutcome",
    "extract_json",
    "load_json",
    "locate_span",
    "repair_span",
    "strip_code_fences",
    # Projection
    "FIELD_LABELS",
    "label_for",
    "project",
    "record_to_fields",
    # LLM client and cost tracking
    "LLMClient",
    "CallUsage",
    "CostTracker",
    # Logging
    "GenerationLogger",
    "RunContext",
    "get_logger",
    "reset_logger",
]
