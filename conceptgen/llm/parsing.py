"""Tolerant JSON extraction from LLM output."""

import json
import re
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class JSONExtractionError(ValueError):
    """No valid JSON value could be recovered from the text."""


def _extract_json_from_text(text: str) -> str | None:
    """Return the first balanced JSON object in text, ignoring braces in strings."""
    brace_count = 0
    start_idx = None
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == '\\' and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == '{':
            if brace_count == 0:
                start_idx = i
            brace_count += 1
        elif char == '}' and brace_count > 0:
            brace_count -= 1
            if brace_count == 0 and start_idx is not None:
                return text[start_idx:i + 1]

    return None


def _clean_json_string(text: str) -> str:
    """Strip BOM/zero-width characters and trailing commas."""
    text = text.strip('\ufeff\u200b\u200c\u200d')
    # Trailing commas before } or ] are a common LLM mistake
    return re.sub(r',(\s*[}\]])', r'\1', text)


def parse_json_response(response: str) -> Any:
    """Parse JSON from an LLM response, handling common formatting issues.

    Handles code fences, preamble text before the JSON, and trailing commas.

    Args:
        response: Raw LLM response string.

    Returns:
        Parsed JSON value.

    Raises:
        JSONExtractionError: If no JSON value can be recovered.
    """
    if not response or not response.strip():
        raise JSONExtractionError("Empty response from LLM")

    text = response.strip()

    match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text, re.IGNORECASE)
    if match and match.group(1).strip()[:1] in ("{", "["):
        text = match.group(1).strip()

    try:
        return json.loads(_clean_json_string(text))
    except json.JSONDecodeError as e:
        logger.debug("direct_parse_failed", error=str(e))

    extracted = _extract_json_from_text(text)
    if extracted:
        try:
            return json.loads(_clean_json_string(extracted))
        except json.JSONDecodeError as e:
            logger.debug("extracted_parse_failed", error=str(e))

    logger.error(
        "json_parse_error",
        response_preview=text[:300] if len(text) > 300 else text,
    )
    raise JSONExtractionError(f"Failed to parse LLM JSON response. Response preview: {text[:150]}")
