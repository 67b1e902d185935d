"""
Integration Tests for the RAG Pipeline Runner

Tests chunk -> retrieve -> rerank -> generate end to end on small inline
document sets, with artifacts, trace and evidence scoring.
"""

import json

import pytest

from agentlab.core.contracts import ReporterContext
from agentlab.models import RunStatus
from agentlab.modules.rag import (
    EmbeddingAdapter,
    LLMReranker,
    RagEvidenceReporter,
    RagMetricsEvaluator,
    RagPipelineRunner,
    SimpleReranker,
)


class RecordingEmbedding(EmbeddingAdapter):
    """One-hot on whether the text mentions 'gamma'."""

    def __init__(self):
        self.calls = 0

    async def embed(self, texts):
        self.calls += 1
        return [[1.0, 0.0] if "gamma" in text.lower() else [0.0, 1.0] for text in texts]


def with_input(task, **task_input):
    return task.model_copy(update={"input": task_input})


def artifact_ids(run):
    return [artifact.schema_id for artifact in run.artifacts]


def retrieved_ids(run):
    return [chunk["chunk_id"] for chunk in run.get_artifact("rag.retrieved").payload["chunks"]]


class TestBM25Template:
    """Default pipeline: whole documents, BM25, template generator."""

    @pytest.mark.asyncio
    async def test_answer_cites_retrieved_chunk(self, rag_task, rag_config):
        run = await RagPipelineRunner().execute(rag_task, rag_config)

        assert run.status == RunStatus.COMPLETED
        assert run.output["answer"] == "Alpha only document"
        assert run.output["sentences"] == [
            {"sentence_id": "s1", "text": "Alpha only document", "citations": [{"chunk_id": "d1"}]}
        ]
        assert run.output["sources_used"] == ["d1"]
        assert run.output["generator_type"] == "template"
        assert run.metrics.tokens is None

    @pytest.mark.asyncio
    async def test_artifacts_and_trace(self, rag_task, rag_config):
        run = await RagPipelineRunner().execute(rag_task, rag_config)

        assert artifact_ids(run) == ["rag.retrieved", "rag.generated", "rag.citations"]
        retrieved = run.get_artifact("rag.retrieved")
        assert retrieved.produced_by_step_id == "retrieve"
        assert retrieved.payload["query"] == "Alpha"
        assert retrieved.payload["top_k_used"] == 1
        assert run.get_artifact("rag.citations").payload == {"chunk_ids": ["d1"]}
        assert run.get_artifact("rag.generated").produced_by_step_id == "generate"

        assert [(e.step, e.event) for e in run.trace] == [
            ("chunk", "start"),
            ("chunk", "end"),
            ("retrieve", "start"),
            ("retrieve", "end"),
            ("generate", "start"),
            ("generate", "end"),
        ]

    @pytest.mark.asyncio
    async def test_no_overlap_retrieves_nothing(self, rag_task, rag_config):
        run = await RagPipelineRunner().execute(with_input(rag_task, query="Delta"), rag_config)

        assert run.succeeded
        assert retrieved_ids(run) == []
        assert run.output["sentences"] == []

        reports = await RagEvidenceReporter().run(run.id, ReporterContext.from_run(run))
        assert reports[0].payload["taxonomy"] == "retrieval_failed"

    @pytest.mark.asyncio
    async def test_sentence_chunking(self, rag_task, rag_config):
        config = {
            **rag_config,
            "dataset": {"documents": [{"id": "d1", "text": "Alpha leads. Beta follows."}]},
            "chunking": {"strategy": "sentence"},
        }

        run = await RagPipelineRunner().execute(with_input(rag_task, query="Beta"), config)

        assert retrieved_ids(run) == ["d1#c2"]
        assert run.output["answer"] == "Beta follows."

    @pytest.mark.asyncio
    async def test_empty_query_fails(self, rag_task, rag_config):
        run = await RagPipelineRunner().execute(with_input(rag_task, query="  "), rag_config)

        assert run.status == RunStatus.FAILED
        assert "non-empty query" in run.error.message
        assert run.artifacts == []


class TestTopK:
    """Request override, then configuration, then the default of 5."""

    @pytest.mark.asyncio
    async def test_request_override_wins(self, rag_task, rag_config):
        config = {**rag_config, "retriever": {"type": "bm25", "top_k": 2}}
        task = with_input(rag_task, query="document", retrieval={"top_k": 1})

        run = await RagPipelineRunner().execute(task, config)

        assert len(retrieved_ids(run)) == 1
        assert run.get_artifact("rag.retrieved").payload["top_k_used"] == 1

    @pytest.mark.asyncio
    async def test_config_value(self, rag_task, rag_config):
        config = {**rag_config, "retriever": {"type": "bm25", "top_k": 2}}

        run = await RagPipelineRunner().execute(with_input(rag_task, query="document"), config)

        assert retrieved_ids(run) == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_default(self, rag_task, rag_config):
        config = {**rag_config, "retriever": {"type": "bm25"}}

        run = await RagPipelineRunner().execute(with_input(rag_task, query="document"), config)

        assert run.get_artifact("rag.retrieved").payload["top_k_used"] == 5
        assert retrieved_ids(run) == ["d1", "d2", "d3"]


class TestReranking:
    @pytest.mark.asyncio
    async def test_simple_reranker(self, rag_task, rag_config):
        config = {**rag_config, "reranker": {"enabled": True, "type": "simple"}}
        task = with_input(rag_task, query="document", retrieval={"top_k": 3})

        run = await RagPipelineRunner(rerankers={"simple": SimpleReranker()}).execute(task, config)

        assert artifact_ids(run) == ["rag.retrieved", "rag.reranked", "rag.generated", "rag.citations"]
        reranked = run.get_artifact("rag.reranked").payload
        assert reranked["reranker_type"] == "simple"
        # Longer text first; equal lengths keep retrieval order
        assert [c["chunk_id"] for c in reranked["chunks"]] == ["d1", "d3", "d2"]
        assert [c["rank"] for c in reranked["chunks"]] == [1, 2, 3]
        assert run.output["sources_used"] == ["d1", "d3", "d2"]
        assert ("rerank", "end") in [(e.step, e.event) for e in run.trace]

    @pytest.mark.asyncio
    async def test_llm_reranker(self, rag_task, rag_config, fake_llm):
        config = {**rag_config, "reranker": {"enabled": True, "type": "llm"}}
        task = with_input(rag_task, query="document", retrieval={"top_k": 3})
        client = fake_llm('{"scores": [0.1, 0.2, 0.9]}')

        run = await RagPipelineRunner(rerankers={"llm": LLMReranker(client)}).execute(task, config)

        assert run.output["sources_used"] == ["d3", "d2", "d1"]

    @pytest.mark.asyncio
    async def test_missing_reranker_fails_and_keeps_artifacts(self, rag_task, rag_config):
        config = {**rag_config, "reranker": {"enabled": True, "type": "simple"}}

        run = await RagPipelineRunner().execute(rag_task, config)

        assert run.status == RunStatus.FAILED
        assert 'no "simple" reranker' in run.error.message
        assert artifact_ids(run) == ["rag.retrieved"]
        assert run.trace[-1].event == "execution_failed"

    @pytest.mark.asyncio
    async def test_disabled_reranker_skipped(self, rag_task, rag_config):
        config = {**rag_config, "reranker": {"enabled": False, "type": "llm"}}

        run = await RagPipelineRunner().execute(rag_task, config)

        assert run.succeeded
        assert run.get_artifact("rag.reranked") is None


class TestVectorAndHybrid:
    @pytest.mark.asyncio
    async def test_hybrid_with_hash_embedding(self, rag_task, rag_config):
        config = {**rag_config, "embedding": "hash", "retriever": {"type": "hybrid", "top_k": 3}}

        run = await RagPipelineRunner().execute(rag_task, config)

        chunks = run.get_artifact("rag.retrieved").payload["chunks"]
        assert [c["chunk_id"] for c in chunks] == ["d1", "d3", "d2"]
        assert chunks[0]["score"] == pytest.approx(1.0)
        assert chunks[2]["score"] == pytest.approx(0.0)

    @pytest.mark.asyncio
    async def test_vector_uses_injected_embedder(self, rag_task, rag_config):
        embedder = RecordingEmbedding()
        config = {**rag_config, "retriever": {"type": "vector", "top_k": 1}}

        run = await RagPipelineRunner(embedder=embedder).execute(
            with_input(rag_task, query="gamma rays"), config
        )

        assert retrieved_ids(run) == ["d3"]
        assert embedder.calls > 0

    @pytest.mark.asyncio
    async def test_hash_setting_overrides_injected_embedder(self, rag_task, rag_config):
        embedder = RecordingEmbedding()
        config = {**rag_config, "embedding": "hash", "retriever": {"type": "vector", "top_k": 1}}

        await RagPipelineRunner(embedder=embedder).execute(rag_task, config)

        assert embedder.calls == 0

    @pytest.mark.asyncio
    async def test_hybrid_weights_from_config(self, rag_task, rag_config):
        config = {
            **rag_config,
            "retriever": {"type": "hybrid", "top_k": 1, "bm25_weight": 0.0, "vector_weight": 1.0},
        }

        run = await RagPipelineRunner(embedder=RecordingEmbedding()).execute(
            with_input(rag_task, query="Alpha gamma"), config
        )

        assert retrieved_ids(run) == ["d3"]


class TestLLMGeneration:
    @staticmethod
    def reply(*cited: str) -> str:
        return json.dumps(
            {
                "answer": "Alpha is described.",
                "sentences": [
                    {"sentence_id": "s1", "text": "Alpha is described.", "citations": [{"chunk_id": c} for c in cited]}
                ],
            }
        )

    @pytest.mark.asyncio
    async def test_llm_generator(self, rag_task, rag_config, fake_llm):
        client = fake_llm(self.reply("d1"), token_usage=100)
        config = {**rag_config, "generator": {"type": "llm", "temperature": 0.1, "max_tokens": 300}}

        run = await RagPipelineRunner(llm_client=client).execute(rag_task, config)

        assert run.succeeded
        assert run.output["generator_type"] == "llm"
        assert run.output["sources_used"] == ["d1"]
        assert run.metrics.tokens == 100
        assert run.metrics.cost == pytest.approx(0.0002)
        assert client.calls[0]["temperature"] == 0.1
        assert client.calls[0]["max_tokens"] == 300

        generate_end = [e for e in run.trace if e.step == "generate" and e.event == "end"][0]
        assert generate_end.data["attempts"] == 1

    @pytest.mark.asyncio
    async def test_repair_then_failure(self, rag_task, rag_config, fake_llm):
        client = fake_llm(self.reply("d2"), self.reply("d9"))
        config = {**rag_config, "generator": {"type": "llm"}}

        run = await RagPipelineRunner(llm_client=client).execute(rag_task, config)

        assert run.status == RunStatus.FAILED
        assert run.error.message.startswith("Invalid generator output after repair")
        assert len(client.calls) == 2
        assert artifact_ids(run) == ["rag.retrieved"]

    @pytest.mark.asyncio
    async def test_llm_without_client_fails(self, rag_task, rag_config):
        config = {**rag_config, "generator": {"type": "llm"}}

        run = await RagPipelineRunner().execute(rag_task, config)

        assert run.status == RunStatus.FAILED
        assert "no llm generator" in run.error.message


class TestEvidenceScoring:
    @pytest.mark.asyncio
    async def test_grounded_run_scores(self, rag_task, rag_config):
        run = await RagPipelineRunner().execute(rag_task, rag_config)
        reports = await RagEvidenceReporter().run(run.id, ReporterContext.from_run(run))

        scores = await RagMetricsEvaluator().evaluate(run, rag_task, reports)
        by_metric = {s.metric: s.value for s in scores}

        assert by_metric["citation_precision"] == 1.0
        assert by_metric["hallucination_rate"] == 0.0
