"""
Robust JSON Parser for reasoning-agent responses.

Handles common formatting issues in agent output:
- Markdown code fences (```json ... ```)
- Prose wrapped around a JSON object
- Trailing commas, unquoted keys, Python literals
"""

import json
import re
from typing import Any, Dict, List, Union

from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_SCORE_PATTERN = re.compile(r"score['\":\s]+(\d+(?:\.\d+)?)", re.IGNORECASE)
_FEEDBACK_PATTERN = re.compile(r"feedback[\s\S]*?\[([\s\S]*?)\]", re.IGNORECASE)
_QUOTED = re.compile(r'"([^"]*)"')


def parse_json_from_llm(response: str) -> Union[Dict[str, Any], List[Any], None]:
    """
    Extract and parse JSON from an agent response string.

    Returns:
        Parsed object, or None when nothing parseable was found.
    """
    if not response:
        return None

    match = _FENCED_BLOCK.search(response)
    cleaned_json = response
    if match:
        cleaned_json = match.group(1).strip()
    else:
        cleaned_json = _slice_outer_json(cleaned_json)

    try:
        return json.loads(cleaned_json)
    except json.JSONDecodeError:
        repaired_json = _repair_json(cleaned_json)
        try:
            return json.loads(repaired_json)
        except json.JSONDecodeError as e:
            logger.debug("json_repair_failed", error=str(e), snippet=cleaned_json[:100])
            return None


def extract_score_fallback(response: str) -> tuple[float | None, list[str]]:
    """
    Best-effort extraction of ``score`` and ``feedback`` from malformed output.

    Returns:
        (score or None, feedback strings)
    """
    if not response:
        return None, []

    score_match = _SCORE_PATTERN.search(response)
    score = float(score_match.group(1)) if score_match else None

    feedback: list[str] = []
    feedback_match = _FEEDBACK_PATTERN.search(response)
    if feedback_match:
        feedback = [item for item in _QUOTED.findall(feedback_match.group(1)) if item]

    return score, feedback


def _slice_outer_json(text: str) -> str:
    first_brace = text.find("{")
    first_bracket = text.find("[")
    candidates = [i for i in (first_brace, first_bracket) if i != -1]
    if not candidates:
        return text
    start_idx = min(candidates)
    end_idx = max(text.rfind("}"), text.rfind("]"))
    if end_idx > start_idx:
        return text[start_idx:end_idx + 1]
    return text


def _repair_json(json_str: str) -> str:
    """
    Common agent JSON repairs:
    - Quote bare keys
    - Drop trailing commas
    - Strip control characters
    - True/False/None to JSON literals
    """
    json_str = re.sub(r"[\x00-\x1F\x7F]", "", json_str)
    json_str = re.sub(r"([{,])\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*:", r'\1"\2":', json_str)
    json_str = re.sub(r",\s*([\]}])", r"\1", json_str)
    json_str = re.sub(r"\bTrue\b", "true", json_str)
    json_str = re.sub(r"\bFalse\b", "false", json_str)
    json_str = re.sub(r"\bNone\b", "null", json_str)
    return json_str
