"""Pytest configuration and shared fixtures.

Provides reusable test fixtures for:
- A scripted LLM client that records every call
- A ladder table with placeholder model names
- Sample model responses
"""

import asyncio
import json

import pytest

from cardgen.core.model_ladder import LadderTable, ModelLadder
from cardgen.core.pipeline_logger import reset_logger

# bound at import so tests patching asyncio.sleep do not see these yields
_yield_to_loop = asyncio.sleep


@pytest.fixture(autouse=True)
def _fresh_logger():
    """Each test starts with a new global GenerationLogger."""
    reset_logger()
    yield
    reset_logger()


# =============================================================================
# Scripted LLM Client
# =============================================================================


class ScriptedClient:
    """Fake LLM client returning scripted outcomes per model.

    Each model maps to a list of outcomes consumed in order. A string is
    returned as the response text; an exception instance is raised.
    """

    def __init__(self, script: dict[str, list]):
        self.script = {model: list(outcomes) for model, outcomes in script.items()}
        self.calls: list[str] = []
        self.prompts: list[str] = []

    async def complete(self, prompt: str, model: str, generation_type: str = "") -> str:
        self.calls.append(model)
        self.prompts.append(prompt)
        # concurrent runs interleave here
        await _yield_to_loop(0)
        outcomes = self.script.get(model)
        if not outcomes:
            raise AssertionError(f"Unexpected call to {model}")
        outcome = outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def call_count(self, model: str) -> int:
        return self.calls.count(model)


@pytest.fixture
def scripted_client():
    """Factory for ScriptedClient instances."""
    return ScriptedClient


# =============================================================================
# Model Ladder
# =============================================================================


@pytest.fixture
def ladder_table():
    """Ladder table with placeholder model identifiers."""
    return LadderTable(fast="fast-model", high_capacity=("pro-a", "pro-b"))


@pytest.fixture
def ladder(ladder_table):
    return ModelLadder(ladder_table)


# =============================================================================
# Sample Responses
# =============================================================================


@pytest.fixture
def credit_record():
    return {
        "id": "dining-credit-120-annual",
        "Title": "Dining Credit",
        "Category": "dining",
        "Value": "$120",
        "TimePeriod": "annual",
    }


@pytest.fixture
def credit_json(credit_record):
    return json.dumps(credit_record)


@pytest.fixture
def credit_batch_json(credit_record):
    second = dict(credit_record, id="uber-credit-10-monthly", Title="Uber Cash", Value="$10")
    return json.dumps([credit_record, second])
