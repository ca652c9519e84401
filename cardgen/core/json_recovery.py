"""Recovery parser for JSON embedded in LLM output.

Models are asked for bare JSON but regularly return something close to it:
prose around the value, markdown fences, trailing commas, a string cut off
mid-value, or a document that simply stops when the token limit is hit.
`extract_json` turns such text into something json.loads accepts, or returns
the fence-stripped text unchanged so the caller's parse error shows what the
model actually said.

Recovery order:
    direct parse -> fence stripping -> span location
    -> trailing commas -> unterminated strings -> truncate and close

Span location and truncation both rely on JsonScanner, a character-level
state machine that knows whether it is inside a string literal. Braces inside
string values (e.g. a description containing "{placeholder}") never affect
nesting.
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cardgen.core.config import RecoveryConfig
from cardgen.core.errors import JsonUnrecoverable

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")

_CLOSERS = {"{": "}", "[": "]"}


class JsonScanner:
    """Tracks string-literal and nesting state one character at a time.

    State:
        in_string: Inside a string literal.
        escape_next: Previous character was an unconsumed backslash.
        open_levels: Stack of unclosed "{" / "[" seen outside strings.
    """

    def __init__(self):
        self.in_string = False
        self.escape_next = False
        self.open_levels: list[str] = []

    @property
    def depth(self) -> int:
        return len(self.open_levels)

    def feed(self, char: str) -> bool:
        """Advance by one character.

        Returns:
            True if the character is structural (outside any string literal).
        """
        if self.escape_next:
            self.escape_next = False
            return False
        if self.in_string:
            if char == "\\":
                self.escape_next = True
            elif char == '"':
                self.in_string = False
            return False
        if char == '"':
            self.in_string = True
            return False
        if char in _CLOSERS:
            self.open_levels.append(char)
        elif char in "}]" and self.open_levels:
            self.open_levels.pop()
        return True

    def closing_suffix(self) -> str:
        """Closers needed to balance every open level, innermost first."""
        return "".join(_CLOSERS[opener] for opener in reversed(self.open_levels))


@dataclass(frozen=True)
class RepairOutcome:
    """Result of running the repair steps over one span.

    Attributes:
        step: Name of the step that produced parseable text, or "exhausted".
        text: Text after the last applied step.
        ok: Whether `text` parses.
    """

    step: str
    text: str
    ok: bool


def _parses(text: str) -> bool:
    try:
        json.loads(text, strict=False)
    except ValueError:
        return False
    return True


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markdown fence markers."""
    return _FENCE_RE.sub("", text).strip()


def locate_span(text: str, opener: str) -> str | None:
    """Find the first value starting with `opener` ("{" or "[").

    The span ends at the closer that brings nesting back to zero. If that
    never happens (the document was cut off), the span runs to the end of
    the text so truncation recovery can keep the well-formed leading part.

    Returns:
        The span, or None if `opener` does not occur.
    """
    start = text.find(opener)
    if start == -1:
        return None

    scanner = JsonScanner()
    for index in range(start, len(text)):
        char = text[index]
        if scanner.feed(char) and char in "}]" and scanner.depth == 0:
            return text[start:index + 1]
    return text[start:]


def remove_trailing_commas(text: str) -> str | None:
    """Drop commas directly before a closing brace or bracket."""
    fixed = _TRAILING_COMMA_RE.sub(r"\1", text)
    return fixed if fixed != text else None


def _count_unescaped_quotes(line: str) -> int:
    count = 0
    escaped = False
    for char in line:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            count += 1
    return count


def close_unterminated_strings(text: str) -> str | None:
    """Close string values that end a line without their closing quote.

    A line with an odd number of unescaped quotes whose text after the last
    quote contains no comma is assumed to hold a string value missing its
    closing quote. Approximate by nature; later steps still get a chance if
    this guess is wrong.
    """
    fixed_lines = []
    for line in text.split("\n"):
        if _count_unescaped_quotes(line) % 2 == 1:
            tail = line[line.rfind('"') + 1:]
            if tail.strip() and "," not in tail:
                stripped = line.rstrip()
                if not stripped.endswith('"') and not stripped.endswith('",'):
                    line = stripped + '"'
        fixed_lines.append(line)

    fixed = "\n".join(fixed_lines)
    return fixed if fixed != text else None


def _is_safe_cut(open_levels: list[str]) -> bool:
    """A comma is a safe cut point when no array is open below the root.

    Cutting inside a nested array would close it early and leave a list that
    looks complete but is missing elements. The root level may be an array:
    a batch keeps its complete records.
    """
    return all(level == "{" for level in open_levels[1:])


def truncate_to_last_complete_field(text: str) -> str | None:
    """Cut after the last complete member and close every open level.

    The cut is made at the last safe comma outside a string literal, so a
    field whose value was cut off is dropped rather than completed with
    invented content. A nested array that was cut off is dropped with its
    field. Can drop more than strictly necessary when the last member before
    the cut-off is itself complete.
    """
    scanner = JsonScanner()
    cut = None
    for index, char in enumerate(text):
        if scanner.feed(char) and char == "," and _is_safe_cut(scanner.open_levels):
            cut = index
    if cut is None:
        return None

    head = text[:cut]
    scanner = JsonScanner()
    for char in head:
        scanner.feed(char)
    return head + scanner.closing_suffix()


_REPAIR_STEPS: tuple[tuple[str, Callable[[str], str | None]], ...] = (
    ("span", lambda text: text),
    ("trailing_commas", remove_trailing_commas),
    ("unterminated_strings", close_unterminated_strings),
    ("truncation", truncate_to_last_complete_field),
)


def repair_span(span: str) -> RepairOutcome:
    """Apply the repair steps cumulatively, stopping at the first that parses.

    A step returning None does not apply to the text and is skipped.
    """
    current = span
    for step, transform in _REPAIR_STEPS:
        candidate = transform(current)
        if candidate is None:
            continue
        current = candidate
        if _parses(current):
            return RepairOutcome(step=step, text=current, ok=True)
    return RepairOutcome(step="exhausted", text=current, ok=False)


def _span_openers(text: str) -> tuple[str, ...]:
    """Object spans are preferred unless the text starts with an array of them."""
    first_object = text.find("{")
    first_array = text.find("[")
    if first_array != -1 and (first_object == -1 or first_array < first_object):
        return ("[", "{")
    return ("{", "[")


def extract_json(text: str) -> str:
    """Extract parseable JSON text from an LLM response.

    Args:
        text: Raw model output.

    Returns:
        `text` itself when it already parses, otherwise a repaired span, or
        the fence-stripped text if nothing could be recovered.
    """
    if _parses(text):
        return text

    cleaned = strip_code_fences(text)
    if _parses(cleaned):
        return cleaned

    for opener in _span_openers(cleaned):
        span = locate_span(cleaned, opener)
        if span is None:
            continue
        outcome = repair_span(span)
        if outcome.ok:
            if outcome.step != "span":
                logger.info(f"Recovered JSON {opener} span via {outcome.step}")
            return outcome.text
        logger.debug(f"Repairs exhausted for {opener} span ({len(span)} chars)")

    return cleaned


def _log_decode_context(text: str, position: int):
    radius = RecoveryConfig.ERROR_CONTEXT_CHARS
    start = max(0, position - radius)
    end = min(len(text), position + radius)
    logger.error(f"Failed to parse JSON at position {position}")
    logger.error(f"Context: {text[start:end]}")


def load_json(text: str) -> Any:
    """Recover and parse the JSON value in an LLM response.

    Raises:
        JsonUnrecoverable: If no recovery step produced parseable JSON.
    """
    extracted = extract_json(text)
    try:
        return json.loads(extracted, strict=False)
    except json.JSONDecodeError as e:
        _log_decode_context(extracted, e.pos)
        raise JsonUnrecoverable(
            f"Failed to parse AI response as JSON: {e.msg} (char {e.pos})",
            payload=extracted,
            position=e.pos,
        ) from e
