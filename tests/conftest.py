"""
Pytest Configuration and Shared Fixtures

Provides reusable fixtures for unit, integration, and e2e tests.
"""

import os
from typing import Any

import pytest

from agentlab.config import get_settings
from agentlab.core.engine import InMemoryStorage
from agentlab.core.registry import EvaluatorRegistry, ReporterRegistry, RunnerRegistry
from agentlab.llm import ChatMessage, CompletionClient, CompletionResult
from agentlab.models import AtomicTask, TaskMetadata
from agentlab.modules.rag import RagDocument

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest."""
    # Set test environment
    os.environ["ENVIRONMENT"] = "development"
    os.environ["LOG_LEVEL"] = "DEBUG"
    os.environ["LOG_FORMAT"] = "text"

    # Dummy API keys for tests that never call a real backend
    if "OPENAI_API_KEY" not in os.environ:
        os.environ["OPENAI_API_KEY"] = "sk-test-key"
    if "ANTHROPIC_API_KEY" not in os.environ:
        os.environ["ANTHROPIC_API_KEY"] = "sk-ant-test-key"

    get_settings.cache_clear()


def pytest_collection_modifyitems(config, items):
    """Modify test items during collection."""
    # Auto-mark tests based on path
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "e2e" in path:
            item.add_marker(pytest.mark.e2e)


# ============================================================================
# Text-generation collaborator
# ============================================================================


class FakeCompletionClient(CompletionClient):
    """
    Scripted completion client.

    Replies are consumed in order; an Exception instance is raised instead
    of returned. Once the script is exhausted the last reply repeats.
    """

    def __init__(self, replies: list[Any] | None = None, token_usage: int = 0):
        self.replies = list(replies or [])
        self.token_usage = token_usage
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResult:
        self.calls.append(
            {"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )
        if not self.replies:
            raise RuntimeError("FakeCompletionClient has no scripted reply")

        index = min(len(self.calls), len(self.replies)) - 1
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        return CompletionResult(text=reply, token_usage=self.token_usage, latency=1.0)


@pytest.fixture
def fake_llm():
    """Factory for scripted completion clients."""

    def _make(*replies: Any, token_usage: int = 0) -> FakeCompletionClient:
        return FakeCompletionClient(list(replies), token_usage=token_usage)

    return _make


# ============================================================================
# Registry and storage fixtures
# ============================================================================


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def runner_registry() -> RunnerRegistry:
    return RunnerRegistry()


@pytest.fixture
def evaluator_registry() -> EvaluatorRegistry:
    return EvaluatorRegistry()


@pytest.fixture
def reporter_registry() -> ReporterRegistry:
    return ReporterRegistry()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def intent_task() -> AtomicTask:
    """Intent task expecting a greeting."""
    return AtomicTask(
        id="intent-1",
        name="Greeting detection",
        type="intent",
        input={"text": "Hello there!"},
        expected={"intent": "greeting", "confidence": 0.8},
        metadata=TaskMetadata(tags=["intent", "smoke"]),
    )


@pytest.fixture
def intent_config() -> dict[str, Any]:
    return {"intents": ["greeting", "farewell", "question"]}


@pytest.fixture
def dialogue_task() -> AtomicTask:
    return AtomicTask(
        id="dialogue-1",
        type="dialogue",
        input={
            "message": "Can you recommend a book?",
            "history": [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello! How can I help?"},
            ],
        },
        expected={"response_contains": ["book"], "min_response_length": 10},
    )


@pytest.fixture
def memory_task() -> AtomicTask:
    return AtomicTask(
        id="memory-1",
        type="memory",
        input={"operation": "extract", "message": "My name is Ada and I work as an engineer."},
        expected={"operation": "extract", "min_memory_count": 1, "required_keys": ["name"]},
    )


@pytest.fixture
def rag_documents() -> list[RagDocument]:
    return [
        RagDocument(id="d1", text="Alpha only document"),
        RagDocument(id="d2", text="Beta only document"),
        RagDocument(id="d3", text="Gamma only document"),
    ]


@pytest.fixture
def rag_config(rag_documents) -> dict[str, Any]:
    return {
        "dataset": {"documents": [doc.model_dump() for doc in rag_documents]},
        "retriever": {"type": "bm25", "top_k": 1},
        "generator": {"type": "template"},
    }


@pytest.fixture
def rag_task() -> AtomicTask:
    return AtomicTask(id="rag-1", type="rag", input={"query": "Alpha"})
