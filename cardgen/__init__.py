"""Card data generation pipeline.

Turns pasted, unstructured credit card text into validated card, credit,
perk and multiplier records using an LLM, recovering from malformed JSON,
rate limits and truncated output along the way.

Architecture:
    core/             - recovery parser, projector, failure classifier,
                        model ladder, LLM client, logging, errors
    prompts/          - extraction prompt templates
    pydantic_models/  - request and result models
    orchestrator.py   - retry and fallback loop

Usage:
    from cardgen import GenerationRequest, GenerationType, generate_data

    request = GenerationRequest(
        raw_data="$300 annual travel credit ...",
        generation_type=GenerationType.CREDIT,
    )
    result = await generate_data(request)

CLI:
    cardgen credit benefits.txt --batch
"""

from cardgen.orchestrator import GenerationOrchestrator, generate_data
from cardgen.pydantic_models import (
    GeneratedField,
    GeneratedItem,
    GenerationRequest,
    GenerationResult,
    GenerationType,
)

__all__ = [
    # Entry points
    "GenerationOrchestrator",
    "generate_data",
    # Models
    "GeneratedField",
    "GeneratedItem",
    "GenerationRequest",
    "GenerationResult",
    "GenerationType",
]
