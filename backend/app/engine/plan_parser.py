"""Parse LLM drawing output into a DrawingPlan.

Supports:
1. Direct JSON output
2. JSON embedded in a markdown code block
3. JSON wrapped in prose ("Sure! Here is the plan: {...} Enjoy!")

Anything else degrades to a description-only plan with no commands.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from app.models.drawing import DrawingPlan

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def extract_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` block in ``text``, or None.

    Braces inside JSON string literals are ignored.
    """
    fence = _FENCE_RE.search(text)
    if fence and "{" in fence.group(1):
        text = fence.group(1)

    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end != -1:
            return text[start:end + 1]
        start = text.find("{", start + 1)
    return None


def _balanced_end(text: str, start: int) -> int:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def parse_drawing_plan(text: str) -> DrawingPlan:
    """Parse LLM output into a DrawingPlan; never raises."""
    candidate = extract_json_object(text)
    if candidate is None:
        logger.info("No JSON object in drawing response, using text as description")
        return DrawingPlan(description=text, commands=[])

    try:
        return DrawingPlan.model_validate(json.loads(candidate))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Could not parse drawing commands, using text response: %s", e)
        return DrawingPlan(description=text, commands=[])
