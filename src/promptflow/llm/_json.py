from __future__ import annotations

import json
import re
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from .errors import JSONExtractionError, LLMValidationError

_OPEN_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSE_FENCE = re.compile(r"\n?```$")

_CLOSERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    """Remove a leading/trailing triple-backtick fence (optionally tagged json)."""

    out = text.strip()
    if not out.startswith("```"):
        return out

    out = _OPEN_FENCE.sub("", out, count=1)
    out = _CLOSE_FENCE.sub("", out, count=1)
    return out.strip()


def extract_first_json(text: str) -> str:
    """Return the first balanced JSON object or array substring in ``text``.

    Brackets inside string literals (including escaped quotes) do not count
    toward depth.
    """

    s = text.strip()
    first_obj = s.find("{")
    first_arr = s.find("[")

    if first_obj == -1 and first_arr == -1:
        raise JSONExtractionError("No JSON object found")

    if first_obj != -1 and (first_arr == -1 or first_obj < first_arr):
        start = first_obj
    else:
        start = first_arr

    open_char = s[start]
    close_char = _CLOSERS[open_char]

    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(s)):
        ch = s[i]

        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
            continue

        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1

        if depth == 0:
            return s[start : i + 1]

    raise JSONExtractionError("Unterminated JSON")


def parse_json_from_model_output(text: str) -> Any:
    """Parse JSON from a model response that may carry fences or prose."""

    normalized = strip_code_fences(text)

    try:
        return json.loads(normalized)
    except ValueError:
        pass

    extracted = extract_first_json(normalized)
    try:
        return json.loads(extracted)
    except ValueError as e:
        raise JSONExtractionError(f"Failed to parse JSON: {e}") from e


def _field_path(error) -> str:
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(f".{p}" if parts else str(p))
    return "".join(parts) or "<root>"


def validate_json(instance: Any, schema: dict[str, Any]) -> None:
    """Validate against a JSON Schema; the error names the offending field."""

    validator = Draft7Validator(schema)
    first = best_match(validator.iter_errors(instance))
    if first is None:
        return

    raise LLMValidationError(
        f"JSON schema validation failed at {_field_path(first)}: {first.message}"
    )
