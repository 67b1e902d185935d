"""Static definitions of the RAG capability."""

from agentlab.core.registry import (
    MethodDefinitionRegistry,
    TaskDefinitionRegistry,
    WorkflowDefinitionRegistry,
)
from agentlab.models import MethodDefinition, TaskDefinition, WorkflowDefinition, WorkflowStep

from .schemas import STEP_CHUNK, STEP_GENERATE, STEP_RERANK, STEP_RETRIEVE

RAG_TASK_DEFINITIONS = [
    TaskDefinition(
        id="rag.qa",
        name="RAG Question Answering",
        type="rag",
        success_criteria=["grounded_answer", "citation_precision"],
        error_taxonomy=["retrieval_failed", "no_citations", "unsupported_citations"],
    )
]

RAG_WORKFLOW_DEFINITIONS = [
    WorkflowDefinition(
        id="rag.retrieve-generate",
        name="Retrieve and Generate",
        steps=[
            WorkflowStep(step_id=STEP_CHUNK, name="Chunk documents"),
            WorkflowStep(step_id=STEP_RETRIEVE, name="Retrieve relevant chunks"),
            WorkflowStep(step_id=STEP_RERANK, name="Rerank candidates (optional)"),
            WorkflowStep(step_id=STEP_GENERATE, name="Generate grounded answer"),
        ],
    )
]

RAG_METHOD_DEFINITIONS = [
    MethodDefinition(
        id="rag.bm25.template",
        name="BM25 Template Generator",
        strategy="bm25",
        implementation="rag.bm25",
    ),
    MethodDefinition(
        id="rag.hybrid.template",
        name="Hybrid BM25 + Vector Template Generator",
        strategy="hybrid",
        implementation="rag.bm25",
    ),
    MethodDefinition(
        id="rag.bm25.llm",
        name="BM25 LLM Generator",
        strategy="bm25",
        implementation="rag.bm25",
    ),
]


def register_rag_definitions(
    task_registry: TaskDefinitionRegistry,
    workflow_registry: WorkflowDefinitionRegistry,
    method_registry: MethodDefinitionRegistry,
) -> None:
    for task_definition in RAG_TASK_DEFINITIONS:
        task_registry.register(task_definition)
    for workflow_definition in RAG_WORKFLOW_DEFINITIONS:
        workflow_registry.register(workflow_definition)
    for method_definition in RAG_METHOD_DEFINITIONS:
        method_registry.register(method_definition)
