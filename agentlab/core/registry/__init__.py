"""Plugin and definition registries. Instantiate one set per runtime."""

from .base import Registry
from .definition_registry import (
    ArtifactSchemaRegistry,
    MethodDefinitionRegistry,
    TaskDefinitionRegistry,
    WorkflowDefinitionRegistry,
)
from .evaluator_registry import EvaluatorRegistry
from .reporter_registry import ReporterRegistry
from .runner_registry import RunnerRegistry

__all__ = [
    "Registry",
    "RunnerRegistry",
    "EvaluatorRegistry",
    "ReporterRegistry",
    "TaskDefinitionRegistry",
    "WorkflowDefinitionRegistry",
    "MethodDefinitionRegistry",
    "ArtifactSchemaRegistry",
]
