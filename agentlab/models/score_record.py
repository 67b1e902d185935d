"""Score record data models."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .artifact import utc_now

ScoreValue = bool | int | float | str


class ScoreEvidence(BaseModel):
    """Explainability data attached to a score."""

    model_config = ConfigDict(frozen=True)

    explanation: str | None = None
    snippets: list[str] | None = None
    alignment: dict[str, Any] | None = None
    report_refs: list[str] | None = Field(default=None, description="Ids of reports used")


class ScoreRecord(BaseModel):
    """Result of a single metric for a run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    run_id: str
    metric: str = Field(..., description="Metric name (e.g., 'accuracy', 'latency')")
    value: ScoreValue
    target: str = Field(
        default="final",
        description="'final' (whole output), 'global' (whole run) or 'step:<id>'",
    )
    evidence: ScoreEvidence | None = None
    evaluator_id: str
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("target")
    @classmethod
    def validate_target(cls, value: str) -> str:
        if value in ("final", "global"):
            return value
        if value.startswith("step:") and len(value) > len("step:"):
            return value
        raise ValueError(f"Invalid score target: {value!r}")
