"""Unit-of-work data models: atomic tasks and scenarios."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskMetadata(BaseModel):
    """Free-form task metadata."""

    model_config = ConfigDict(frozen=True, extra="allow")

    tags: list[str] = Field(default_factory=list, description="Labels for grouping tasks")
    priority: int | None = None
    timeout: float | None = Field(
        default=None,
        description="Advisory timeout hint in milliseconds; never enforced by the engine",
    )


class AtomicTask(BaseModel):
    """A single self-contained request to one capability module."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Task identifier")
    name: str = Field(default="", description="Human readable task name")
    type: str = Field(..., min_length=1, description="Capability type (e.g., 'intent', 'rag')")

    input: Any = Field(default=None, description="Capability-specific input payload")
    expected: Any = Field(default=None, description="Expected output used for scoring")

    context: dict[str, Any] | None = None
    metadata: TaskMetadata = Field(default_factory=TaskMetadata)
    extensions: dict[str, Any] = Field(
        default_factory=dict, description="Capability-specific extension fields"
    )


class InputBinding(BaseModel):
    """Wires one value into a scenario step's input."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(
        ...,
        alias="from",
        description="'step:<step_id>:<dotted.path>' or 'input:<field>'",
    )
    to: str = Field(..., min_length=1, description="Dotted destination path in the step input")


class ScenarioTask(BaseModel):
    """An ordered chain of atomic tasks with explicit data wiring between steps."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""

    steps: list[AtomicTask] = Field(default_factory=list, description="Steps, run in order")
    input_map: dict[str, list[InputBinding]] = Field(
        default_factory=dict, description="Bindings keyed by step id"
    )

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def scenario_input(self) -> dict[str, Any]:
        """Initial input bag, read from ``metadata['scenario_input']``."""
        value = self.metadata.get("scenario_input")
        return value if isinstance(value, dict) else {}
