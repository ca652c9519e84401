"""Generation orchestrator: drives one request through the model ladder.

Flow per request:
  ModelLadder -> [model_1, model_2, ...]
  for each model, up to MAX_ATTEMPTS_PER_MODEL attempts:
      LLM call -> extract_json / load_json -> project -> GenerationResult

A failed attempt is classified and mapped to the next action:
  RATE_LIMITED             -> next model (retrying a throttled model wastes quota)
  TRANSIENT_PARSE_FAILURE  -> retry same model after a fixed backoff, then next model
  FATAL                    -> stop; no other model can fix bad credentials

When the ladder runs out, the last error is raised unchanged. Calls are
strictly sequential: each fallback decision depends on the previous outcome.
The orchestrator keeps no state between runs, so one instance can serve
concurrent requests.
"""

import asyncio
import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

from cardgen.core.config import API_KEY_ENV_VAR, RetryConfig
from cardgen.core.cost_tracker import CostTracker
from cardgen.core.errors import (
    AllModelsExhausted,
    AttemptFailure,
    AttemptLog,
    FailureClass,
    ServiceNotConfigured,
)
from cardgen.core.failure_classifier import classify
from cardgen.core.json_recovery import load_json
from cardgen.core.llm_client import LLMClient
from cardgen.core.llm_router import build_router
from cardgen.core.model_ladder import ModelLadder
from cardgen.core.pipeline_logger import GenerationLogger, RunContext, get_logger
from cardgen.core.projector import project
from cardgen.prompts import build_generation_prompt
from cardgen.pydantic_models import (
    GeneratedItem,
    GenerationRequest,
    GenerationResult,
    GenerationType,
)


class TextCompletionClient(Protocol):
    """Anything that turns (prompt, model) into text, e.g. LLMClient."""

    async def complete(self, prompt: str, model: str, generation_type: str = "") -> str:
        ...


class NextAction(Enum):
    """Transition taken after a failed attempt."""
    RETRY = "retry"
    NEXT_MODEL = "next_model"
    ABORT = "abort"


def next_action(failure_class: FailureClass, attempt_index: int, max_attempts: int) -> NextAction:
    """Decide what follows a failed attempt.

    Args:
        failure_class: Classification of the failure.
        attempt_index: 0-based attempt number on the current model.
        max_attempts: Attempts allowed per model.
    """
    if failure_class is FailureClass.FATAL:
        return NextAction.ABORT
    if failure_class is FailureClass.RATE_LIMITED:
        return NextAction.NEXT_MODEL
    if attempt_index < max_attempts - 1:
        return NextAction.RETRY
    return NextAction.NEXT_MODEL


class GenerationOrchestrator:
    """Runs generation requests with retry and model fallback."""

    def __init__(
        self,
        client: TextCompletionClient,
        ladder: ModelLadder | None = None,
        prompt_builder: Callable[[GenerationRequest], str] = build_generation_prompt,
        max_attempts: int = RetryConfig.MAX_ATTEMPTS_PER_MODEL,
        backoff_seconds: float = RetryConfig.BACKOFF_SECONDS,
        logger: GenerationLogger | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            client: LLM text-completion client.
            ladder: Model selection ladder. Defaults to the configured tiers.
            prompt_builder: Builds the prompt string for a request.
            max_attempts: Attempts per model for parse-class failures.
            backoff_seconds: Fixed delay between attempts on the same model.
            logger: Generation logger. Defaults to the global one.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.ladder = ladder or ModelLadder()
        self.prompt_builder = prompt_builder
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.logger = logger or get_logger()

    async def _attempt(
        self,
        model: str,
        prompt: str,
        generation_type: GenerationType,
        batch_mode: bool,
    ) -> tuple[GeneratedItem, ...]:
        text = await self.client.complete(prompt, model=model, generation_type=generation_type.value)
        return project(load_json(text), batch_mode)

    async def run(self, request: GenerationRequest) -> GenerationResult:
        """Generate records for a request.

        Returns:
            GenerationResult with the items and the model that produced them.

        Raises:
            The last error observed, unchanged, if no model succeeded.
            AllModelsExhausted: If the ladder returned no models at all.
        """
        batch_mode = request.effective_batch_mode
        models = self.ladder.select_models(
            request.generation_type, batch_mode, request.is_refinement
        )
        prompt = self.prompt_builder(request)

        run = self.logger.start_generation(
            request.generation_type.value, models,
            batch_mode=batch_mode, refinement=request.is_refinement,
        )
        try:
            return await self._run_ladder(request, models, prompt, batch_mode, run)
        finally:
            self.logger.close_run(run)

    async def _run_ladder(
        self,
        request: GenerationRequest,
        models: list[str],
        prompt: str,
        batch_mode: bool,
        run: RunContext,
    ) -> GenerationResult:
        attempts = AttemptLog()
        last_error: Exception | None = None
        model_index = 0
        attempt_index = 0

        while model_index < len(models):
            model = models[model_index]
            self.logger.attempt(model, model_index, len(models), attempt_index, self.max_attempts)

            try:
                items = await self._attempt(model, prompt, request.generation_type, batch_mode)
            except Exception as e:
                last_error = e
                failure_class = classify(e)
                attempts.add(AttemptFailure(
                    model=model,
                    attempt=attempt_index + 1,
                    failure_class=failure_class,
                    message=str(e),
                    original_error=e,
                ))
                self.logger.attempt_failed(model, failure_class.value, e)

                action = next_action(failure_class, attempt_index, self.max_attempts)
                if action is NextAction.ABORT:
                    break
                if action is NextAction.RETRY:
                    attempt_index += 1
                    await asyncio.sleep(self.backoff_seconds)
                    continue

                if model_index + 1 < len(models):
                    self.logger.fallback(model, models[model_index + 1], failure_class.value)
                model_index += 1
                attempt_index = 0
                continue

            self.logger.end_generation(run, True, model=model, items=len(items))
            return GenerationResult(items=items, model_used=model)

        self.logger.end_generation(run, False, stats=attempts.summary())
        if last_error is None:
            raise AllModelsExhausted(
                f"No models available for {request.generation_type.value} generation"
            )
        raise last_error


async def generate_data(
    request: GenerationRequest,
    client: TextCompletionClient | None = None,
    ladder: ModelLadder | None = None,
    cost_tracker: CostTracker | None = None,
    verbose: bool = False,
    log_dir: str | Path | None = None,
) -> GenerationResult:
    """Convenience entry point for one generation request.

    Builds the default LLMClient when none is injected, after checking that
    the provider's API key is configured.

    Raises:
        ServiceNotConfigured: If no client is given and the API key is unset.
    """
    if client is None:
        if not os.environ.get(API_KEY_ENV_VAR):
            raise ServiceNotConfigured(API_KEY_ENV_VAR)
        llm_router = build_router(ladder.table) if ladder else None
        client = LLMClient(cost_tracker=cost_tracker, llm_router=llm_router)

    orchestrator = GenerationOrchestrator(
        client=client,
        ladder=ladder,
        logger=get_logger(verbose=verbose, log_dir=log_dir),
    )
    return await orchestrator.run(request)
