"""LiteLLM Router configuration.

The router only owns credentials and deployments. Router-level retries and
fallbacks stay off: the generation orchestrator makes those decisions from
the failure class of each attempt.

Supports:
- Gemini (default): Uses GEMINI_API_KEY
- OpenRouter: Uses OPENROUTER_API_KEY
"""

from litellm import Router

from cardgen.core.config import API_KEY_ENV_VAR
from cardgen.core.model_ladder import LadderTable


def _build_model_list(table: LadderTable) -> list[dict]:
    """One deployment per model in the ladder table."""
    api_key_ref = f"os.environ/{API_KEY_ENV_VAR}"
    return [
        {
            "model_name": model,
            "litellm_params": {
                "model": model,
                "api_key": api_key_ref,
            },
        }
        for model in table.all_models
    ]


def build_router(table: LadderTable | None = None) -> Router:
    """Build the LLM Router for the given ladder table.

    Args:
        table: Models to register. Defaults to LadderTable.from_config().
    """
    return Router(
        model_list=_build_model_list(table or LadderTable.from_config()),
        num_retries=0,
        fallbacks=[],
    )


router = build_router()
