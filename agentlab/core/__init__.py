"""Core harness: plugin contracts, registries and the evaluation engine."""

from .contracts import Evaluator, Reporter, ReporterContext, Runner, TraceRecorder
from .engine import (
    EvalEngine,
    EvalResult,
    InMemoryStorage,
    RunComparison,
    ScenarioExecutor,
    Storage,
)
from .errors import (
    AgentLabError,
    DuplicateRegistrationError,
    GenerationParseError,
    MissingStepConfigError,
    NotRegisteredError,
    RunNotFoundError,
    RunnerNotFoundError,
    TypeMismatchError,
)
from .registry import (
    ArtifactSchemaRegistry,
    EvaluatorRegistry,
    MethodDefinitionRegistry,
    ReporterRegistry,
    RunnerRegistry,
    TaskDefinitionRegistry,
    WorkflowDefinitionRegistry,
)

__all__ = [
    "Runner",
    "Evaluator",
    "Reporter",
    "ReporterContext",
    "TraceRecorder",
    "EvalEngine",
    "EvalResult",
    "RunComparison",
    "ScenarioExecutor",
    "Storage",
    "InMemoryStorage",
    "AgentLabError",
    "RunnerNotFoundError",
    "TypeMismatchError",
    "MissingStepConfigError",
    "DuplicateRegistrationError",
    "NotRegisteredError",
    "GenerationParseError",
    "RunNotFoundError",
    "RunnerRegistry",
    "EvaluatorRegistry",
    "ReporterRegistry",
    "TaskDefinitionRegistry",
    "WorkflowDefinitionRegistry",
    "MethodDefinitionRegistry",
    "ArtifactSchemaRegistry",
]
