"""Memory extraction and retrieval capability."""

from .evaluator import MemoryMetricsEvaluator, score_accuracy
from .models import (
    MemoryExpected,
    MemoryInput,
    MemoryItem,
    MemoryOutput,
    MemoryRunnerConfig,
)
from .runner import (
    MemoryLLMRunner,
    limit_memories,
    parse_extraction_response,
    retrieve_memories,
)

__all__ = [
    "MemoryLLMRunner",
    "MemoryMetricsEvaluator",
    "MemoryRunnerConfig",
    "MemoryInput",
    "MemoryOutput",
    "MemoryItem",
    "MemoryExpected",
    "score_accuracy",
    "retrieve_memories",
    "limit_memories",
    "parse_extraction_response",
]
