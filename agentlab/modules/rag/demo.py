"""Fixed demo dataset, task and configuration for reproducibility checks."""

from typing import Any

from agentlab.models import AtomicTask, TaskMetadata

from .models import RagDocument

RAG_DEMO_SEED = 20260208

RAG_DEMO_DATASET: dict[str, Any] = {
    "id": "rag.demo.v1",
    "name": "RAG Demo Dataset v1",
    "documents": [
        RagDocument(
            id="doc.alpha",
            text="Alpha is the first Greek letter and often marks the beginning of a sequence.",
        ),
        RagDocument(
            id="doc.beta",
            text="Beta follows Alpha and is commonly used to label second versions or test releases.",
        ),
        RagDocument(
            id="doc.gamma",
            text="Gamma is the third Greek letter and appears in mathematics and physics contexts.",
        ),
    ],
}


def build_rag_demo_task(
    input_overrides: dict[str, Any] | None = None,
    tags: list[str] | None = None,
    **overrides: Any,
) -> AtomicTask:
    """
    Demo task: ``"What is Alpha?"`` with top_k 1.

    ``input_overrides`` is merged over the default input; other keyword arguments
    replace task fields.
    """
    task_input = {"query": "What is Alpha?", "retrieval": {"top_k": 1}}
    task_input.update(input_overrides or {})

    fields: dict[str, Any] = {
        "id": "rag.demo.task.v1",
        "name": "RAG Demo Retrieval Task",
        "type": "rag",
        "input": task_input,
        "metadata": TaskMetadata(tags=tags if tags is not None else ["demo", "reproducible"]),
    }
    fields.update(overrides)
    return AtomicTask(**fields)


def build_rag_demo_config(
    seed: int | None = None,
    top_k: int | None = None,
    documents: list[RagDocument] | None = None,
) -> dict[str, Any]:
    """Demo pipeline config: whole-document chunks, BM25, template generator."""
    docs = documents if documents is not None else RAG_DEMO_DATASET["documents"]
    return {
        "seed": seed if seed is not None else RAG_DEMO_SEED,
        "embedding": "hash",
        "dataset": {"documents": [doc.model_dump() for doc in docs]},
        "chunking": {"strategy": "doc"},
        "retriever": {"type": "bm25", "top_k": top_k if top_k is not None else 1},
        "generator": {"type": "template"},
    }
