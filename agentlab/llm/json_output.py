"""Parsing of JSON objects returned by the text-generation collaborator."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def extract_json(text: str) -> Any:
    """
    Parse ``text`` as JSON, tolerating a surrounding markdown code fence.

    Raises:
        json.JSONDecodeError: If the (unfenced) text is not valid JSON
    """
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        stripped = match.group(1)
    return json.loads(stripped)
