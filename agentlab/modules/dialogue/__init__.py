"""Dialogue management capability."""

from .evaluator import DialogueMetricsEvaluator, score_relevance
from .models import (
    DialogueExpected,
    DialogueInput,
    DialogueMessage,
    DialogueOutput,
    DialogueRunnerConfig,
)
from .runner import DialogueLLMRunner, truncate_history

__all__ = [
    "DialogueLLMRunner",
    "DialogueMetricsEvaluator",
    "DialogueRunnerConfig",
    "DialogueInput",
    "DialogueOutput",
    "DialogueMessage",
    "DialogueExpected",
    "score_relevance",
    "truncate_history",
]
