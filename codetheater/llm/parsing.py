"""
codetheater.llm.parsing - LLM output JSON parsing with validation.

Handles parsing the director's act summary into structured JSON with
error recovery.
"""

from __future__ import annotations

import json
import re
from typing import Any

from codetheater.exceptions import LLMResponseError


def extract_json_from_response(response: str) -> str:
    """Extract JSON from LLM response.

    Args:
        response: Raw LLM response text

    Returns:
        Extracted JSON string

    Raises:
        LLMResponseError: If no JSON found
    """
    text = response.strip()

    # Remove markdown code blocks
    if "```" in text:
        text = re.sub(r"```json\s*", "", text)
        text = re.sub(r"```\s*", "", text)
        text = text.strip()

    json_match = re.search(r"\{[\s\S]*\}", text)
    if json_match:
        return json_match.group(0)

    raise LLMResponseError("No JSON object found in response")


def repair_json(text: str) -> str:
    """Attempt to repair common JSON issues.

    Args:
        text: JSON string with potential issues

    Returns:
        Repaired JSON string
    """
    # Remove trailing commas before } or ]
    text = re.sub(r",(\s*[}\]])", r"\1", text)

    open_braces = text.count("{")
    close_braces = text.count("}")
    open_brackets = text.count("[")
    close_brackets = text.count("]")

    if open_brackets > close_brackets:
        text += "]" * (open_brackets - close_brackets)
    if open_braces > close_braces:
        text += "}" * (open_braces - close_braces)

    return text


def parse_llm_json(response: str) -> dict[str, Any]:
    """Parse JSON from LLM response with error recovery.

    Handles markdown code fences, trailing commas, missing closing
    braces and prose before/after the JSON object.

    Args:
        response: Raw LLM response text

    Returns:
        Parsed JSON dict

    Raises:
        LLMResponseError: If parsing fails
    """
    text = extract_json_from_response(response)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(repair_json(text))
    except json.JSONDecodeError:
        pass

    raise LLMResponseError(
        f"Failed to parse LLM response as JSON after repair attempts.\n\n"
        f"Response (first 500 chars):\n{text[:500]}"
    )


def validate_act_summary(data: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize the director's act summary.

    Accepts both snake_case and camelCase keys.

    Args:
        data: Parsed JSON from LLM

    Returns:
        Dict with summary, key_events and character_states
    """
    summary = data.get("summary") or "The story continues..."
    key_events = data.get("key_events", data.get("keyEvents")) or []
    states = data.get("character_states", data.get("characterStates")) or {}

    if not isinstance(key_events, list):
        raise LLMResponseError("Act summary 'key_events' must be a list")
    if not isinstance(states, dict):
        raise LLMResponseError("Act summary 'character_states' must be an object")

    return {
        "summary": str(summary),
        "key_events": [str(e) for e in key_events],
        "character_states": {str(k): str(v) for k, v in states.items()},
    }
