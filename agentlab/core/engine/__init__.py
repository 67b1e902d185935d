"""Evaluation engine, scenario executor and storage."""

from .eval_engine import EvalEngine, EvalResult, MetricComparison, RunComparison
from .scenario_executor import ScenarioExecutor
from .storage import InMemoryStorage, Storage

__all__ = [
    "EvalEngine",
    "EvalResult",
    "MetricComparison",
    "RunComparison",
    "ScenarioExecutor",
    "Storage",
    "InMemoryStorage",
]
