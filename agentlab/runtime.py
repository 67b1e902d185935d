"""
Runtime assembly.

Builds isolated registries, registers every built-in unit and definition and
wires them into an EvalEngine. Each call returns a fresh bundle, so tests and
processes never share registry state.
"""

from dataclasses import dataclass

from agentlab.core.engine import EvalEngine, InMemoryStorage, ScenarioExecutor, Storage
from agentlab.core.registry import (
    ArtifactSchemaRegistry,
    EvaluatorRegistry,
    MethodDefinitionRegistry,
    ReporterRegistry,
    RunnerRegistry,
    TaskDefinitionRegistry,
    WorkflowDefinitionRegistry,
)
from agentlab.llm import CompletionClient, get_llm_client
from agentlab.modules import (
    RAG_ARTIFACT_SCHEMAS,
    DialogueLLMRunner,
    DialogueMetricsEvaluator,
    IntentLLMRunner,
    IntentMetricsEvaluator,
    MemoryLLMRunner,
    MemoryMetricsEvaluator,
    RagEvidenceReporter,
    RagMetricsEvaluator,
    RagPipelineRunner,
    register_rag_definitions,
)
from agentlab.modules.rag import EmbeddingAdapter, LLMReranker, SimpleReranker
from agentlab.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EvalRuntime:
    """Everything a caller needs to run evaluations."""

    engine: EvalEngine
    scenario_executor: ScenarioExecutor
    storage: Storage
    runner_registry: RunnerRegistry
    evaluator_registry: EvaluatorRegistry
    reporter_registry: ReporterRegistry
    artifact_schema_registry: ArtifactSchemaRegistry
    task_definition_registry: TaskDefinitionRegistry
    workflow_definition_registry: WorkflowDefinitionRegistry
    method_definition_registry: MethodDefinitionRegistry


def create_eval_runtime(
    storage: Storage | None = None,
    llm_client: CompletionClient | None = None,
    embedder: EmbeddingAdapter | None = None,
) -> EvalRuntime:
    """
    Create a fully registered evaluation runtime.

    Args:
        storage: Storage collaborator (default: InMemoryStorage)
        llm_client: Text-generation collaborator (default: LangChain client
            built from settings; no call is made until a unit needs it)
        embedder: Embedding adapter for vector/hybrid retrieval
            (default: deterministic HashEmbedding)

    Returns:
        EvalRuntime bundle

    Example:
        runtime = create_eval_runtime(llm_client=my_client)
        result = await runtime.engine.evaluate_task(task, "intent.llm", {"intents": ["greeting"]})
    """
    llm_client = llm_client or get_llm_client()
    storage = storage or InMemoryStorage()

    runner_registry = RunnerRegistry()
    evaluator_registry = EvaluatorRegistry()
    reporter_registry = ReporterRegistry()
    artifact_schema_registry = ArtifactSchemaRegistry()
    task_definition_registry = TaskDefinitionRegistry()
    workflow_definition_registry = WorkflowDefinitionRegistry()
    method_definition_registry = MethodDefinitionRegistry()

    runner_registry.register(IntentLLMRunner(llm_client))
    runner_registry.register(DialogueLLMRunner(llm_client))
    runner_registry.register(MemoryLLMRunner(llm_client))
    runner_registry.register(
        RagPipelineRunner(
            embedder=embedder,
            llm_client=llm_client,
            rerankers={"simple": SimpleReranker(), "llm": LLMReranker(llm_client)},
        )
    )

    evaluator_registry.register(IntentMetricsEvaluator())
    evaluator_registry.register(DialogueMetricsEvaluator())
    evaluator_registry.register(MemoryMetricsEvaluator())
    evaluator_registry.register(RagMetricsEvaluator())

    reporter_registry.register(RagEvidenceReporter())

    artifact_schema_registry.register_many(RAG_ARTIFACT_SCHEMAS)
    register_rag_definitions(
        task_definition_registry,
        workflow_definition_registry,
        method_definition_registry,
    )

    scenario_executor = ScenarioExecutor()
    engine = EvalEngine(
        runner_registry=runner_registry,
        evaluator_registry=evaluator_registry,
        storage=storage,
        reporter_registry=reporter_registry,
        scenario_executor=scenario_executor,
    )

    logger.info(
        "Evaluation runtime created",
        extra={
            "runners": runner_registry.ids(),
            "evaluators": evaluator_registry.ids(),
            "reporters": reporter_registry.ids(),
        },
    )

    return EvalRuntime(
        engine=engine,
        scenario_executor=scenario_executor,
        storage=storage,
        runner_registry=runner_registry,
        evaluator_registry=evaluator_registry,
        reporter_registry=reporter_registry,
        artifact_schema_registry=artifact_schema_registry,
        task_definition_registry=task_definition_registry,
        workflow_definition_registry=workflow_definition_registry,
        method_definition_registry=method_definition_registry,
    )
