"""
RAG pipeline runner: chunk -> retrieve -> (rerank) -> generate.

Stateless per invocation. Every stage records ``start``/``end`` trace events
tagged with its step id, and the retrieve/rerank/generate stages each emit a
typed artifact. A failing stage yields a failed RunRecord that keeps the
artifacts produced before it.
"""

from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentlab.config.settings import get_settings
from agentlab.core.contracts import Runner, TraceRecorder
from agentlab.llm import CompletionClient, estimate_cost
from agentlab.models import ArtifactRecord, AtomicTask, RunRecord
from agentlab.models.artifact import utc_now
from agentlab.utils.logger import get_logger

from .chunkers import get_chunker
from .embeddings import EmbeddingAdapter, HashEmbedding
from .generators import Generator, LLMGenerator, get_generator
from .models import Chunk, GeneratedAnswer, RagDocument, RetrievedChunk
from .rerankers import Reranker
from .retrievers import HybridRetriever, LexicalRetriever, VectorRetriever
from .schemas import (
    CITATIONS,
    GENERATED,
    RERANKED,
    RETRIEVED,
    STEP_CHUNK,
    STEP_GENERATE,
    STEP_RERANK,
    STEP_RETRIEVE,
)

logger = get_logger(__name__)


class DatasetConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    documents: list[RagDocument] = Field(default_factory=list)


class ChunkingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    strategy: Literal["doc", "sentence", "fixed", "sliding"] = "doc"
    size: int = Field(default_factory=lambda: get_settings().rag_chunk_size)
    overlap: int = Field(default_factory=lambda: get_settings().rag_chunk_overlap, ge=0)


class RetrieverConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["bm25", "vector", "hybrid"] = "bm25"
    top_k: int | None = Field(default=None, ge=1)
    bm25_weight: float | None = Field(default=None, ge=0.0)
    vector_weight: float | None = Field(default=None, ge=0.0)


class RerankerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    type: Literal["simple", "llm"] = "simple"


class GeneratorConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["template", "llm"] = "template"
    temperature: float | None = None
    max_tokens: int | None = Field(default=None, gt=0)


class RagRunnerConfig(BaseModel):
    """Validated configuration of one RAG run."""

    model_config = ConfigDict(extra="ignore")

    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retriever: RetrieverConfig = Field(default_factory=RetrieverConfig)
    reranker: RerankerConfig = Field(default_factory=RerankerConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)

    seed: int | None = Field(default=None, description="Recorded for reproducibility only")
    embedding: str | None = Field(
        default=None, description="'hash' forces the deterministic embedding"
    )


class RetrievalOverride(BaseModel):
    top_k: int | None = Field(default=None, ge=1)


class RagInput(BaseModel):
    query: str
    retrieval: RetrievalOverride | None = None

    @field_validator("query")
    @classmethod
    def validate_query(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Input must include a non-empty query")
        return value


def resolve_top_k(rag_input: RagInput, config: RagRunnerConfig) -> int:
    """Request override, else configuration, else the settings default."""
    if rag_input.retrieval and rag_input.retrieval.top_k is not None:
        return rag_input.retrieval.top_k
    if config.retriever.top_k is not None:
        return config.retriever.top_k
    return get_settings().rag_default_top_k


def _chunk_payload(chunks: list[RetrievedChunk]) -> list[dict[str, Any]]:
    return [chunk.model_dump() for chunk in chunks]


class RagPipelineRunner(Runner):
    """
    Retrieval-augmented generation over an inline document set.

    Args:
        embedder: Embedding adapter for vector/hybrid retrieval
            (deterministic HashEmbedding when omitted)
        llm_client: Collaborator used by the ``llm`` generator
        rerankers: Rerankers by type; enabling a reranker whose type is
            missing here fails the run
        llm_generator: Pre-built LLM generator, overriding ``llm_client``

    Example:
        runner = RagPipelineRunner(rerankers={"simple": SimpleReranker()})
        run = await runner.execute(task, {"dataset": {"documents": docs}})
    """

    id = "rag.bm25"
    type = "rag"
    version = "0.1.0"

    def __init__(
        self,
        embedder: EmbeddingAdapter | None = None,
        llm_client: CompletionClient | None = None,
        rerankers: dict[str, Reranker] | None = None,
        llm_generator: LLMGenerator | None = None,
    ):
        self.embedder = embedder
        self.llm_client = llm_client
        self.rerankers = dict(rerankers or {})
        self.llm_generator = llm_generator

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        run_id = str(uuid4())
        started_at = utc_now()
        trace = TraceRecorder()
        artifacts: list[ArtifactRecord] = []

        try:
            rag_config = RagRunnerConfig.model_validate(config or {})
            rag_input = RagInput.model_validate(task.input or {})
            query = rag_input.query
            top_k = resolve_top_k(rag_input, rag_config)

            chunks = self._chunk(rag_config, trace)
            retrieved = await self._retrieve(query, chunks, top_k, rag_config, trace, artifacts)

            candidates = retrieved
            if rag_config.reranker.enabled:
                candidates = await self._rerank(query, retrieved, rag_config, trace, artifacts)

            answer, tokens = await self._generate(query, candidates, rag_config, trace, artifacts)

            logger.info(
                f"RAG run {run_id} completed with {len(answer.sentences)} sentences",
                extra={"task_id": task.id, "top_k": top_k, "retrieved": len(retrieved)},
            )
            return self._completed_record(
                run_id,
                task,
                started_at,
                trace,
                output=answer.model_dump(),
                config=rag_config.model_dump(),
                tokens=tokens or None,
                cost=estimate_cost(tokens),
                artifacts=artifacts,
            )

        except Exception as e:
            logger.warning(f"RAG run failed for task {task.id}: {e}", extra={"task_id": task.id})
            return self._failed_record(run_id, task, started_at, trace, e, config, artifacts=artifacts)

    def _chunk(self, config: RagRunnerConfig, trace: TraceRecorder) -> list[Chunk]:
        strategy = config.chunking.strategy
        trace.add("start", {"strategy": strategy}, step=STEP_CHUNK)

        chunker = get_chunker(strategy, config.chunking.size, config.chunking.overlap)
        chunks = chunker.chunk_all(config.dataset.documents)

        trace.add(
            "end",
            {"strategy": strategy, "num_docs": len(config.dataset.documents), "num_chunks": len(chunks)},
            step=STEP_CHUNK,
        )
        return chunks

    async def _retrieve(
        self,
        query: str,
        chunks: list[Chunk],
        top_k: int,
        config: RagRunnerConfig,
        trace: TraceRecorder,
        artifacts: list[ArtifactRecord],
    ) -> list[RetrievedChunk]:
        retriever_type = config.retriever.type
        trace.add("start", {"top_k": top_k, "retriever_type": retriever_type}, step=STEP_RETRIEVE)

        retriever = self._build_retriever(config)
        retrieved = await retriever.search(query, chunks, top_k)

        artifacts.append(
            ArtifactRecord(
                schema_id=RETRIEVED,
                produced_by_step_id=STEP_RETRIEVE,
                payload={"query": query, "top_k_used": top_k, "chunks": _chunk_payload(retrieved)},
            )
        )
        trace.add(
            "end",
            {
                "top_k": top_k,
                "num_docs": len(config.dataset.documents),
                "num_chunks": len(chunks),
                "num_results": len(retrieved),
            },
            step=STEP_RETRIEVE,
        )
        return retrieved

    async def _rerank(
        self,
        query: str,
        retrieved: list[RetrievedChunk],
        config: RagRunnerConfig,
        trace: TraceRecorder,
        artifacts: list[ArtifactRecord],
    ) -> list[RetrievedChunk]:
        reranker_type = config.reranker.type
        reranker = self.rerankers.get(reranker_type)
        if reranker is None:
            raise ValueError(f'Reranker enabled but no "{reranker_type}" reranker was supplied')

        trace.add("start", {"reranker_type": reranker_type, "num_chunks": len(retrieved)}, step=STEP_RERANK)
        reranked = await reranker.rerank(retrieved, query)

        artifacts.append(
            ArtifactRecord(
                schema_id=RERANKED,
                produced_by_step_id=STEP_RERANK,
                payload={
                    "query": query,
                    "reranker_type": reranker_type,
                    "chunks": _chunk_payload(reranked),
                },
            )
        )
        trace.add("end", {"reranker_type": reranker_type, "num_results": len(reranked)}, step=STEP_RERANK)
        return reranked

    async def _generate(
        self,
        query: str,
        chunks: list[RetrievedChunk],
        config: RagRunnerConfig,
        trace: TraceRecorder,
        artifacts: list[ArtifactRecord],
    ) -> tuple[GeneratedAnswer, int]:
        generator_type = config.generator.type
        trace.add("start", {"generator_type": generator_type}, step=STEP_GENERATE)

        generator = self._build_generator(config)
        result = await generator.generate(query, chunks)
        answer = result.answer

        artifacts.append(
            ArtifactRecord(
                schema_id=GENERATED,
                produced_by_step_id=STEP_GENERATE,
                payload=answer.model_dump(),
            )
        )
        artifacts.append(
            ArtifactRecord(
                schema_id=CITATIONS,
                produced_by_step_id=STEP_GENERATE,
                payload={"chunk_ids": list(answer.sources_used)},
            )
        )
        trace.add(
            "end",
            {
                "generator_type": generator_type,
                "sentence_count": len(answer.sentences),
                "attempts": result.attempts,
            },
            step=STEP_GENERATE,
        )
        return answer, result.token_usage

    def _build_retriever(self, config: RagRunnerConfig):
        if config.retriever.type == "bm25":
            return LexicalRetriever()

        embedder = self._embedder(config)
        if config.retriever.type == "vector":
            return VectorRetriever(embedder)
        return HybridRetriever(
            embedder,
            bm25_weight=config.retriever.bm25_weight,
            vector_weight=config.retriever.vector_weight,
        )

    def _embedder(self, config: RagRunnerConfig) -> EmbeddingAdapter:
        if config.embedding == "hash" or self.embedder is None:
            return HashEmbedding()
        return self.embedder

    def _build_generator(self, config: RagRunnerConfig) -> Generator:
        llm_generator = self.llm_generator
        if config.generator.type == "llm" and llm_generator is None and self.llm_client is not None:
            llm_generator = LLMGenerator(
                self.llm_client,
                temperature=config.generator.temperature,
                max_tokens=config.generator.max_tokens,
            )
        return get_generator(config.generator.type, llm_generator)
