"""
JSON helpers backed by orjson
=============================

orjson parsing plus the cleanup needed before reading LLM output.
"""

import re
from typing import Any

import orjson

JSONDecodeError = orjson.JSONDecodeError

_FENCE_OPEN = re.compile(r"^```(?:json|JSON)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def loads(s: Any) -> Any:
    """Deserialize a JSON str/bytes document."""
    return orjson.loads(s)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def loads_ai_response(text: str) -> Any:
    """
    Parse JSON produced by a model.

    Raises:
        JSONDecodeError: When the cleaned response is not valid JSON
    """
    return loads(strip_code_fences(text))
