"""Helpers for preparing prompt input and reading structured model output."""
import json
import logging
import re
from typing import Any, Dict, Optional

from config import MAX_INPUT_CHARS

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def sanitize_input(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """
    Bound untrusted message text before it is embedded in a prompt.

    Code blocks are replaced with a placeholder, runs of blank lines are
    collapsed and the result is trimmed and capped at ``max_chars``.
    """
    if not text:
        return ""
    cleaned = _CODE_BLOCK.sub("[CODE_BLOCK]", text)
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
    return cleaned.strip()[:max_chars]


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown fence (```json ... ``` or ``` ... ```)."""
    stripped = text.strip()
    match = _FENCE.match(stripped)
    return match.group(1) if match else stripped


def extract_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object from generated text.

    Returns:
        The decoded object, or None when the text is not a JSON object
    """
    if not text:
        return None
    candidate = strip_code_fence(text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        # Models sometimes wrap the object in prose; try the outermost braces
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            logger.warning(f"Unparseable structured output: {text[:100]!r}")
            return None
        try:
            parsed = json.loads(candidate[start:end + 1])
        except json.JSONDecodeError:
            logger.warning(f"Unparseable structured output: {text[:100]!r}")
            return None
    if not isinstance(parsed, dict):
        logger.warning(f"Structured output is not an object: {type(parsed).__name__}")
        return None
    return parsed


def clamp(value: Any, low: float, high: float, default: float) -> float:
    """Coerce ``value`` to a float inside [low, high], or ``default`` when not numeric."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(low, min(high, number))


def string_list(value: Any) -> list:
    """Coerce a model-provided field to a list of non-empty strings."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]
