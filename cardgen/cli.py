"""CLI entrypoint for card data generation."""

import argparse
import asyncio
import json
import logging
import os
import sys
import warnings
from pathlib import Path

# Suppress LiteLLM's direct prints (must be before import)
os.environ["LITELLM_LOG"] = "ERROR"

warnings.filterwarnings("ignore", message="Unclosed connection")
warnings.filterwarnings("ignore", message="Unclosed client session")
warnings.filterwarnings("ignore", category=ResourceWarning)

for logger_name in ["httpx", "httpcore", "litellm", "LiteLLM", "LiteLLM Router", "aiohttp", "asyncio"]:
    logging.getLogger(logger_name).setLevel(logging.ERROR)

from dotenv import load_dotenv  # noqa: E402 - must be after logging config

load_dotenv()

from cardgen.core.config import API_KEY_ENV_VAR, LLM_PROVIDER  # noqa: E402
from cardgen.core.cost_tracker import CostTracker  # noqa: E402
from cardgen.core.errors import GenerationError  # noqa: E402
from cardgen.pydantic_models import GenerationRequest, GenerationType  # noqa: E402


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


async def generate(
    generation_type: str,
    raw_data: str,
    batch_mode: bool = False,
    refinement_prompt: str | None = None,
    previous_output: dict | list | None = None,
    verbose: bool = False,
    log_dir: str | None = None,
) -> dict | None:
    """Run one generation request and return the result as a dict.

    Returns:
        Result in wire shape, or None on failure (the error is printed).
    """
    from cardgen.orchestrator import generate_data

    if not os.environ.get(API_KEY_ENV_VAR):
        print(f"Error: {API_KEY_ENV_VAR} not set (provider: {LLM_PROVIDER})", file=sys.stderr)
        print(f"Set it in .env or export {API_KEY_ENV_VAR}=...", file=sys.stderr)
        return None

    request = GenerationRequest(
        raw_data=raw_data,
        generation_type=GenerationType(generation_type),
        batch_mode=batch_mode,
        refinement_prompt=refinement_prompt,
        previous_output=previous_output,
    )
    cost_tracker = CostTracker()

    try:
        result = await generate_data(
            request, cost_tracker=cost_tracker, verbose=verbose, log_dir=log_dir,
        )
    except GenerationError as e:
        print(f"\n[ERROR] {e}", file=sys.stderr)
        return None
    except Exception as e:
        print(f"\n[ERROR] Failed to generate data: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return None

    if cost_tracker.call_count > 0:
        print(f"\n{cost_tracker.summary()}", file=sys.stderr)
    return result.to_dict()


def main():
    parser = argparse.ArgumentParser(
        description="Extract structured credit card records from unstructured text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cardgen card sapphire.txt
  cardgen credit benefits.txt --batch -o credits.json
  cat perk.txt | cardgen perk
  cardgen credit benefits.txt --refine "Value should be monthly" --previous credits.json
        """,
    )
    parser.add_argument(
        "type",
        choices=[t.value for t in GenerationType],
        help="Record type to extract",
    )
    parser.add_argument("input", nargs="?", default=None, help="Input text file (default: stdin)")
    parser.add_argument(
        "-b", "--batch",
        action="store_true",
        help="Extract every matching record as a JSON array",
    )
    parser.add_argument(
        "--refine",
        type=str,
        default=None,
        metavar="TEXT",
        help="Refinement instructions for a previous output (requires --previous)",
    )
    parser.add_argument(
        "--previous",
        type=str,
        default=None,
        metavar="FILE",
        help="JSON file holding the output to refine (object or array)",
    )
    parser.add_argument("-o", "--output", default=None, help="Write the result JSON to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output with DEBUG level logging")
    parser.add_argument("--log-dir", default=None, help="Directory for per-run log files")

    args = parser.parse_args()

    if (args.refine is None) != (args.previous is None):
        parser.error("--refine and --previous must be used together")

    previous_output = None
    if args.previous:
        previous_output = json.loads(Path(args.previous).read_text(encoding="utf-8"))
        # previous output may be a full result from an earlier run
        if isinstance(previous_output, dict) and "items" in previous_output and "modelUsed" in previous_output:
            records = [item["json"] for item in previous_output["items"]]
            previous_output = records if args.batch or len(records) != 1 else records[0]

    result = asyncio.run(generate(
        generation_type=args.type,
        raw_data=_read_input(args.input),
        batch_mode=args.batch,
        refinement_prompt=args.refine,
        previous_output=previous_output,
        verbose=args.verbose,
        log_dir=args.log_dir,
    ))

    if result is None:
        sys.exit(1)

    output = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"[OUTPUT] {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
