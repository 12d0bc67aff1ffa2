"""Coercion of loosely typed command parameters.

Params arrive as decoded JSON, so numbers may be strings and booleans may
be "true"/"false".
"""

import json
import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def parse_params(params: dict | str | None) -> dict[str, Any]:
    """Normalise a params object or JSON string to a dict.

    Anything that is not a JSON object decodes to an empty dict, so a
    malformed payload surfaces as missing required params.
    """
    if params is None:
        return {}
    if isinstance(params, dict):
        return params
    if isinstance(params, (str, bytes)):
        trimmed = params.strip()
        if not trimmed:
            return {}
        try:
            decoded = json.loads(trimmed)
        except ValueError:
            logger.debug("Ignoring unparseable params payload")
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def _as_int(value: Any) -> int | None:
    number = _as_number(value)
    if number is None:
        return None
    return int(number)


def _as_string(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_trimmed(value: Any) -> str | None:
    """Trimmed string, or None when absent or blank."""
    text = _as_string(value)
    if text is None:
        return None
    text = text.strip()
    return text or None


def _coerce_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    return default


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)
