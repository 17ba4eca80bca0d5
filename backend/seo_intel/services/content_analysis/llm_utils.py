"""JSON handling for completion-service responses.

Completions often wrap JSON in markdown fences, add preamble text, or emit
slightly broken JSON (trailing commas, truncated closing brackets). Parsing
is attempted once as-is and once after a bounded repair.
"""

import json
import logging
import re
from typing import Any

from seo_intel.errors import MalformedCompletionResponse

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_CLOSERS = {"{": "}", "[": "]"}


def _candidate_text(text: str, expect_array: bool) -> str:
    fence_match = _FENCE_RE.search(text)
    if fence_match:
        return fence_match.group(1)

    opener = "[" if expect_array else "{"
    start = text.find(opener)
    if start == -1:
        return text.strip()
    closer = _CLOSERS[opener]
    end = text.rfind(closer)
    return text[start : end + 1] if end > start else text[start:]


def extract_json_from_response(text: str, *, expect_array: bool = False) -> Any:
    """Extract and parse JSON from a completion response.

    Tries, in order:

    1. Content inside a ```json ... ``` fence.
    2. The first raw JSON object ``{...}`` (or array ``[...]``).
    3. The entire text.

    Raises:
        json.JSONDecodeError: If no valid JSON could be found.
    """
    fence_match = _FENCE_RE.search(text)
    if fence_match:
        return json.loads(fence_match.group(1))

    raw_match = re.search(r"\[.*]" if expect_array else r"\{.*}", text, re.DOTALL)
    if raw_match:
        return json.loads(raw_match.group(0))

    return json.loads(text)


def _balance_brackets(text: str) -> str:
    """Drop unmatched closing brackets and close any left open."""
    out: list[str] = []
    stack: list[str] = []
    in_string = False
    escaped = False

    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in "}]":
            if not stack or stack[-1] != ch:
                continue
            stack.pop()
        out.append(ch)

    if in_string:
        out.append('"')
    out.extend(reversed(stack))
    return "".join(out)


def repair_json(text: str) -> str:
    """Bounded repair: strip trailing commas and balance brackets."""
    repaired = _TRAILING_COMMA_RE.sub(r"\1", text.strip())
    repaired = _balance_brackets(repaired)
    return _TRAILING_COMMA_RE.sub(r"\1", repaired)


def parse_completion_json(text: str, *, expect_array: bool = False) -> Any:
    """Parse a completion response, retrying once after ``repair_json``.

    Raises:
        MalformedCompletionResponse: If the text is not JSON even after repair.
    """
    try:
        return extract_json_from_response(text, expect_array=expect_array)
    except json.JSONDecodeError:
        pass

    candidate = _candidate_text(text, expect_array)
    try:
        data = json.loads(repair_json(candidate))
    except json.JSONDecodeError as e:
        raise MalformedCompletionResponse(text, f"Unrepairable JSON: {e}") from e

    logger.warning("Completion response required JSON repair")
    return data
