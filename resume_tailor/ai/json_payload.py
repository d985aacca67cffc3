from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def _strip_fences(text: str) -> str:
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Return the first well-formed JSON object in a model reply, if any.

    Replies may wrap the object in a fenced code block or surround it with prose.
    """
    if not text or not text.strip():
        return None

    decoder = json.JSONDecoder()
    for candidate in dict.fromkeys((_strip_fences(text), text)):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

        for start in (index for index, char in enumerate(candidate) if char == "{"):
            try:
                parsed, _ = decoder.raw_decode(candidate, start)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed
    return None
