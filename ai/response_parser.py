"""
Parsing of raw JSON text returned by extraction services.
"""

import json
import logging
import re
from typing import Any, Optional

from errors import ResponseFormatError

logger = logging.getLogger(__name__)


def parse_llm_json(raw: str) -> Any:
    """
    Parse the JSON payload of an LLM response.

    Handles common issues:
      - Markdown code fences (```json ... ```)
      - Leading/trailing prose around a JSON object

    Raises ``ResponseFormatError`` if no valid JSON could be found.
    """
    # Strip markdown code fences if present
    cleaned = (raw or "").strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned)
    cleaned = re.sub(r"\s*```$", "", cleaned)
    cleaned = cleaned.strip()

    if not cleaned:
        raise ResponseFormatError("Extraction service returned an empty response")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        first_error = exc

    # Fall back to the outermost {...} in case the model wrapped it in prose
    json_str = _extract_json_substring(cleaned, "{", "}")
    if json_str is not None:
        try:
            return json.loads(json_str)
        except json.JSONDecodeError:
            pass

    logger.warning(
        "Failed to parse LLM JSON (%s): %s", first_error, raw[:200]
    )
    raise ResponseFormatError(
        f"Extraction service response is not valid JSON: {first_error}"
    ) from first_error


def _extract_json_substring(
    text: str, open_char: str, close_char: str
) -> Optional[str]:
    """Find the outermost balanced ``open_char … close_char`` substring."""
    start = text.find(open_char)
    end = text.rfind(close_char)
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]
