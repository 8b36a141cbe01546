"""Recover a JSON value from free-text language model output.

Models asked for JSON do not always answer with JSON alone: the object may be
wrapped in a fenced code block, surrounded by prose, or missing entirely.
``extract_json`` tries four strategies in a fixed order and stops at the first
one that parses:

1. the whole (trimmed) text,
2. the interior of the first fenced code block,
3. a brace-balanced scan that understands JSON string literals,
4. everything from the first ``{`` to the last ``}``.

Extraction does not look at the shape of the value. A bare array or number is
returned as-is and left for the schema validator to reject.
"""

import json
import re
from typing import Any, Callable

from .exceptions import JSONExtractionError
from .logging_config import get_logger

logger = get_logger("extraction")

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")
GREEDY_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

NO_JSON_MESSAGE = (
    "Could not extract valid JSON from response. "
    "The AI may have returned non-JSON content."
)


def parse_direct(text: str) -> Any:
    """Parse the entire text as JSON."""
    return json.loads(text.strip())


def parse_fenced_block(text: str) -> Any:
    """Parse the interior of the first ``` or ```json fenced block."""
    match = FENCED_BLOCK_PATTERN.search(text)
    if not match:
        raise ValueError("No fenced code block found")
    return json.loads(match.group(1))


def find_balanced_object(text: str, start: int) -> int:
    """
    Return the index of the ``}`` closing the object opened at ``start``.

    Braces inside double-quoted strings do not count towards the depth.
    Returns -1 when the text ends before the depth returns to zero.
    """
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index

    return -1


def parse_balanced_braces(text: str) -> Any:
    """
    Parse the first brace-balanced ``{...}`` substring that is valid JSON.

    Candidates that are balanced but do not parse (prose such as
    ``{ignore this}``) are skipped and the scan resumes at the next ``{``.
    """
    start = text.find("{")
    while start != -1:
        end = find_balanced_object(text, start)
        if end != -1:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                pass
        start = text.find("{", start + 1)

    raise ValueError("No balanced JSON object found")


def parse_greedy_braces(text: str) -> Any:
    """Parse everything from the first ``{`` to the last ``}``."""
    match = GREEDY_OBJECT_PATTERN.search(text)
    if not match:
        raise ValueError("No braces found")
    return json.loads(match.group(0))


STRATEGIES: tuple[tuple[str, Callable[[str], Any]], ...] = (
    ("direct", parse_direct),
    ("fenced_block", parse_fenced_block),
    ("balanced_braces", parse_balanced_braces),
    ("greedy_braces", parse_greedy_braces),
)


def extract_json(text: Any) -> Any:
    """
    Extract one JSON value from model output.

    Args:
        text: Raw completion text

    Returns:
        The parsed JSON value (not necessarily an object)

    Raises:
        JSONExtractionError: If the input is empty or no strategy succeeds
    """
    if not isinstance(text, str) or not text.strip():
        raise JSONExtractionError("Invalid input: text must be a non-empty string")

    for name, strategy in STRATEGIES:
        try:
            value = strategy(text)
        except ValueError:
            # json.JSONDecodeError is a ValueError
            continue
        logger.debug("Extracted JSON using %s strategy", name)
        return value

    raise JSONExtractionError(NO_JSON_MESSAGE)
