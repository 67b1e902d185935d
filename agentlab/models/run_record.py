"""Run record data models. The trace is a mandatory part of every record."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .artifact import ArtifactRecord, ReportRecord, utc_now


class RunStatus(str, Enum):
    """Lifecycle status of a run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TraceEvent(BaseModel):
    """A single recorded step of an execution."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    level: Literal["info", "debug", "warn", "error"] = "info"
    step: str | None = Field(default=None, description="Owning step id (scenarios, RAG stages)")
    event: str
    data: Any = None


class RunError(BaseModel):
    """Failure details of a run."""

    model_config = ConfigDict(frozen=True)

    message: str
    step: str | None = Field(default=None, description="Failing scenario step id")
    stack: str | None = None


class RunMetrics(BaseModel):
    """Performance metrics of a run."""

    model_config = ConfigDict(frozen=True)

    latency: float = Field(default=0.0, ge=0.0, description="Latency in milliseconds")
    tokens: int | None = None
    cost: float | None = Field(default=None, description="Cost in USD")


class StepSummary(BaseModel):
    """Summary of one executed scenario step."""

    model_config = ConfigDict(frozen=True)

    step_id: str
    step_name: str = ""
    status: Literal["completed", "failed"]
    latency: float = 0.0
    output: Any = None
    error: str | None = None


class Provenance(BaseModel):
    """Facts needed to explain and reproduce a run."""

    model_config = ConfigDict(frozen=True)

    runner_id: str
    runner_version: str
    config: Any = Field(default_factory=dict, description="Resolved configuration")
    config_hash: str | None = None
    run_fingerprint: str | None = None
    snapshot: dict[str, Any] | None = Field(
        default=None, description="Canonical snapshot the hash was computed over"
    )
    overrides: dict[str, Any] | None = None


class RunRecord(BaseModel):
    """Complete record of one execution."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    task_id: str
    task_type: Literal["atomic", "scenario"] = "atomic"
    capability_type: str | None = None

    status: RunStatus
    output: Any = None
    error: RunError | None = None

    metrics: RunMetrics = Field(default_factory=RunMetrics)
    trace: list[TraceEvent]

    artifacts: list[ArtifactRecord] = Field(default_factory=list)
    reports: list[ReportRecord] = Field(default_factory=list)
    steps: list[StepSummary] | None = None

    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    provenance: Provenance

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETED

    def get_artifact(self, schema_id: str) -> ArtifactRecord | None:
        """Return the last artifact with ``schema_id``, if any."""
        for artifact in reversed(self.artifacts):
            if artifact.schema_id == schema_id:
                return artifact
        return None
