"""Helpers for reading model JSON output and keeping numbers in range."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

CONFIDENCE_RANGE = (1, 100)
MONTHS_RANGE = (0, 120)


def strip_code_fences(content: str) -> str:
    """Drop markdown fence lines (```json ... ```) around a payload."""
    lines = [line for line in content.strip().split("\n") if not line.strip().startswith("```")]
    return "\n".join(lines).strip()


def parse_json_payload(content: str | None) -> Any | None:
    """Parse model output as JSON.

    Tries the raw text first, then once more with markdown fences
    stripped. Returns None if both fail.
    """
    if not content or not content.strip():
        return None
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    stripped = strip_code_fences(content)
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse model JSON: {e}")
        return None


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def as_int(value: Any, default: int) -> int:
    """Coerce numbers and numeric strings ("6", "6 months", 6.7) to int."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = re.search(r"-?\d+", value)
        if match:
            return int(match.group(0))
    return default


def clamp_confidence(value: Any, default: int = 60) -> int:
    return clamp(as_int(value, default), *CONFIDENCE_RANGE)


def clamp_months(value: Any, default: int = 0) -> int:
    return clamp(as_int(value, default), *MONTHS_RANGE)


def as_str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []
