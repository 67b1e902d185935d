"""Capability modules: intent, dialogue, memory and rag."""

from .dialogue import DialogueLLMRunner, DialogueMetricsEvaluator
from .intent import IntentLLMRunner, IntentMetricsEvaluator
from .memory import MemoryLLMRunner, MemoryMetricsEvaluator
from .rag import (
    RAG_ARTIFACT_SCHEMAS,
    RagEvidenceReporter,
    RagMetricsEvaluator,
    RagPipelineRunner,
    register_rag_definitions,
)

__all__ = [
    "IntentLLMRunner",
    "IntentMetricsEvaluator",
    "DialogueLLMRunner",
    "DialogueMetricsEvaluator",
    "MemoryLLMRunner",
    "MemoryMetricsEvaluator",
    "RagPipelineRunner",
    "RagMetricsEvaluator",
    "RagEvidenceReporter",
    "register_rag_definitions",
    "RAG_ARTIFACT_SCHEMAS",
]
