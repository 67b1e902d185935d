"""Shared data models for agentlab."""

from .artifact import (
    ArtifactMetadata,
    ArtifactRecord,
    ArtifactSchema,
    ReportRecord,
)
from .definitions import (
    MethodDefinition,
    TaskDefinition,
    WorkflowDefinition,
    WorkflowStep,
)
from .run_record import (
    Provenance,
    RunError,
    RunMetrics,
    RunRecord,
    RunStatus,
    StepSummary,
    TraceEvent,
)
from .score_record import ScoreEvidence, ScoreRecord, ScoreValue
from .task import AtomicTask, InputBinding, ScenarioTask, TaskMetadata

__all__ = [
    "AtomicTask",
    "TaskMetadata",
    "ScenarioTask",
    "InputBinding",
    "RunRecord",
    "RunStatus",
    "RunError",
    "RunMetrics",
    "TraceEvent",
    "StepSummary",
    "Provenance",
    "ScoreRecord",
    "ScoreEvidence",
    "ScoreValue",
    "ArtifactRecord",
    "ArtifactSchema",
    "ArtifactMetadata",
    "ReportRecord",
    "TaskDefinition",
    "WorkflowDefinition",
    "WorkflowStep",
    "MethodDefinition",
]
