"""Deterministic serialization used for hashing configurations."""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


def stable_stringify(value: Any) -> str:
    """
    Render a value as a canonical JSON string.

    Mapping keys are sorted at every depth while sequence order is preserved,
    so two values that are deep-equal but were built with a different key
    insertion order produce the same string.

    Args:
        value: Any JSON-like value. Pydantic models, enums, dates and sets are
            normalised first.

    Returns:
        Canonical string representation
    """
    value = _normalise(value)

    if value is None:
        return "null"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        body = ",".join(
            f"{json.dumps(str(key))}:{stable_stringify(item)}" for key, item in items
        )
        return "{" + body + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stable_stringify(item) for item in value) + "]"
    return json.dumps(value, ensure_ascii=False)


def _normalise(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=stable_stringify)
    return value
