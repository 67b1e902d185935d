"""
Path expressions for scenario data wiring.

Two expression forms are understood:

- ``step:<step_id>:<dotted.path>`` reads from a previously recorded step output
- ``input:<field>`` reads a field from the scenario's initial input bag

Destinations are plain dotted paths written into a step's input.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Literal

STEP_PREFIX = "step:"
INPUT_PREFIX = "input:"


@dataclass(frozen=True)
class SourceRef:
    """Parsed ``from`` expression of an input binding."""

    kind: Literal["step", "input"]
    name: str
    path: str = ""


def parse_source(expression: str) -> SourceRef | None:
    """
    Parse a binding source expression.

    Returns:
        SourceRef, or None when the expression uses an unknown prefix
    """
    if expression.startswith(STEP_PREFIX):
        # step ids may not contain ':', the remainder is the path
        step_id, _, path = expression[len(STEP_PREFIX):].partition(":")
        return SourceRef(kind="step", name=step_id, path=path)
    if expression.startswith(INPUT_PREFIX):
        return SourceRef(kind="input", name=expression[len(INPUT_PREFIX):])
    return None


def get_by_path(obj: Any, path: str) -> Any:
    """
    Read a value by dotted path.

    An empty path returns ``obj`` itself. Numeric segments index into lists.
    Any missing segment yields None.
    """
    if not path:
        return obj

    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return None
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def set_by_path(obj: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """
    Return a copy of ``obj`` with ``value`` written at the dotted ``path``.

    Missing or non-mapping intermediate segments are created as nested dicts.
    The input mapping is never mutated.
    """
    result = copy.deepcopy(obj) if obj else {}
    parts = path.split(".")

    current = result
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
    return result


@dataclass
class ValueArena:
    """Named values a scenario step can read from: step outputs plus initial input."""

    initial_input: dict[str, Any] = field(default_factory=dict)
    step_outputs: dict[str, Any] = field(default_factory=dict)

    def record(self, step_id: str, output: Any) -> None:
        self.step_outputs[step_id] = output

    def resolve(self, ref: SourceRef) -> Any:
        """Resolve a reference; unknown steps or fields resolve to None."""
        if ref.kind == "step":
            return get_by_path(self.step_outputs.get(ref.name), ref.path)
        return self.initial_input.get(ref.name)
