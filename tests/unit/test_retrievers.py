"""
Unit Tests for Retrievers and Embeddings

Tests BM25, vector and hybrid ranking plus the embedding adapters.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from agentlab.modules.rag import (
    DocumentChunker,
    EmbeddingAdapter,
    HashEmbedding,
    HybridRetriever,
    InMemoryVectorIndex,
    LexicalRetriever,
    OpenAIEmbedding,
    VectorRetriever,
)
from agentlab.modules.rag.models import Chunk
from agentlab.modules.rag.retrievers import bm25_scores, cosine_similarity, min_max_normalize, tokenize


class KeywordEmbedding(EmbeddingAdapter):
    """One dimension per keyword: 1.0 when the text mentions it."""

    KEYWORDS = ("alpha", "beta")

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [[1.0 if kw in text.lower() else 0.0 for kw in self.KEYWORDS] for text in texts]


class StubEmbedding(EmbeddingAdapter):
    def __init__(self, vectors: dict[str, list[float]]):
        self.vectors = vectors

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [self.vectors[text] for text in texts]


@pytest.fixture
def chunks(rag_documents):
    return DocumentChunker().chunk_all(rag_documents)


class TestLexicalRetriever:
    """Tests for BM25 retrieval."""

    def test_tokenize(self):
        assert tokenize("What is Alpha?") == ["what", "is", "alpha"]

    @pytest.mark.asyncio
    async def test_top_match(self, chunks):
        results = await LexicalRetriever().search("Alpha", chunks, top_k=1)

        assert len(results) == 1
        assert results[0].chunk_id == "d1"
        assert results[0].text == "Alpha only document"
        assert results[0].rank == 1
        assert results[0].score > 0

    @pytest.mark.asyncio
    async def test_only_overlapping_chunks_are_candidates(self, chunks):
        results = await LexicalRetriever().search("Alpha", chunks, top_k=5)
        assert [r.chunk_id for r in results] == ["d1"]

    @pytest.mark.asyncio
    async def test_ties_keep_corpus_order(self, chunks):
        results = await LexicalRetriever().search("document", chunks, top_k=3)
        assert [r.chunk_id for r in results] == ["d1", "d2", "d3"]
        assert [r.rank for r in results] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_no_overlap_or_empty_corpus(self, chunks):
        assert await LexicalRetriever().search("zeta", chunks, top_k=3) == []
        assert await LexicalRetriever().search("Alpha", [], top_k=3) == []
        assert await LexicalRetriever().search("???", chunks, top_k=3) == []

    @pytest.mark.asyncio
    async def test_two_document_corpus_multi_term_query(self):
        corpus = [
            Chunk(chunk_id="d2", text="Beta only document", doc_id="d2"),
            Chunk(chunk_id="d1", text="Alpha only document", doc_id="d1"),
        ]

        results = await LexicalRetriever().search("Alpha document", corpus, top_k=2)

        assert [r.chunk_id for r in results] == ["d1", "d2"]
        assert results[0].score > results[1].score > 0

    @pytest.mark.asyncio
    async def test_more_occurrences_rank_higher(self):
        corpus = [
            Chunk(chunk_id="d2", text="alpha gamma", doc_id="d2"),
            Chunk(chunk_id="d1", text="alpha alpha beta", doc_id="d1"),
        ]

        results = await LexicalRetriever().search("alpha", corpus, top_k=2)

        assert [r.chunk_id for r in results] == ["d1", "d2"]
        assert results[0].score > results[1].score > 0

    @pytest.mark.asyncio
    async def test_single_document_corpus(self):
        corpus = [Chunk(chunk_id="only", text="Alpha only document", doc_id="only")]

        results = await LexicalRetriever().search("Alpha", corpus, top_k=3)

        assert [r.chunk_id for r in results] == ["only"]
        assert results[0].score > 0

    def test_common_terms_score_positive(self, chunks):
        # "document" occurs in every chunk
        scores = bm25_scores("document", chunks)
        assert len(scores) == 3
        assert all(score > 0 for score in scores.values())


class TestVectorIndex:
    """Tests for cosine similarity search."""

    def test_cosine_similarity(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0

    def test_search_orders_by_similarity(self):
        index = InMemoryVectorIndex()
        index.add("a", [1.0, 0.0])
        index.add("b", [0.0, 1.0])
        index.add("c", [1.0, 1.0])
        index.add("zero", [0.0, 0.0])

        results = index.search([1.0, 0.0], top_k=3)

        assert [item_id for item_id, _ in results] == ["a", "c", "b"]
        assert results[1][1] == pytest.approx(0.7071, rel=1e-3)
        assert len(index) == 4


class TestVectorRetriever:
    @pytest.mark.asyncio
    async def test_ranks_by_embedding(self, chunks):
        results = await VectorRetriever(KeywordEmbedding()).search("alpha", chunks, top_k=2)

        assert [r.chunk_id for r in results] == ["d1", "d2"]
        assert results[0].score == pytest.approx(1.0)
        assert results[0].text == "Alpha only document"

    @pytest.mark.asyncio
    async def test_empty_corpus(self):
        assert await VectorRetriever(KeywordEmbedding()).search("alpha", [], top_k=2) == []


class TestHybridRetriever:
    """Tests for weighted lexical + vector ranking."""

    def test_min_max_normalize(self):
        assert min_max_normalize({}) == {}
        assert min_max_normalize({"a": 2.0, "b": 4.0, "c": 3.0}) == {"a": 0.0, "b": 1.0, "c": 0.5}
        assert min_max_normalize({"a": 3.0, "b": 3.0}) == {"a": 1.0, "b": 1.0}
        assert min_max_normalize({"a": 0.0}) == {"a": 1.0}
        assert min_max_normalize({"a": -0.5, "b": -0.5}) == {"a": 1.0, "b": 1.0}

    @pytest.mark.asyncio
    async def test_combines_scores(self, chunks):
        retriever = HybridRetriever(KeywordEmbedding(), bm25_weight=0.5, vector_weight=0.5)
        results = await retriever.search("Alpha", chunks, top_k=3)

        assert [r.chunk_id for r in results] == ["d1", "d2", "d3"]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.0)

    @pytest.mark.asyncio
    async def test_weights_shift_ranking(self, chunks):
        # Lexical favours d1, the stub vectors favour d2
        embedder = StubEmbedding(
            {
                "Alpha only document": [1.0, 0.0],
                "Beta only document": [0.0, 1.0],
                "Gamma only document": [0.0, 0.0],
                "Alpha": [0.0, 1.0],
            }
        )

        vector_heavy = HybridRetriever(embedder, bm25_weight=0.2, vector_weight=0.8)
        lexical_heavy = HybridRetriever(embedder, bm25_weight=0.8, vector_weight=0.2)

        assert (await vector_heavy.search("Alpha", chunks, top_k=1))[0].chunk_id == "d2"
        assert (await lexical_heavy.search("Alpha", chunks, top_k=1))[0].chunk_id == "d1"

    @pytest.mark.asyncio
    async def test_lexical_only_weighting(self):
        corpus = [
            Chunk(chunk_id="d2", text="Beta only document", doc_id="d2"),
            Chunk(chunk_id="d1", text="Alpha only document", doc_id="d1"),
        ]
        retriever = HybridRetriever(HashEmbedding(), bm25_weight=1.0, vector_weight=0.0)

        results = await retriever.search("Alpha", corpus, top_k=1)

        assert [r.chunk_id for r in results] == ["d1"]
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_defaults_come_from_settings(self):
        retriever = HybridRetriever(HashEmbedding())
        assert retriever.bm25_weight == 0.5
        assert retriever.vector_weight == 0.5


class TestEmbeddings:
    """Tests for embedding adapters."""

    @pytest.mark.asyncio
    async def test_hash_embedding_is_deterministic(self):
        embedder = HashEmbedding()
        first = await embedder.embed(["alpha", "beta"])
        second = await embedder.embed(["alpha", "beta"])

        assert first == second
        assert len(first) == 2
        assert all(len(vector) == 3 for vector in first)

    @pytest.mark.asyncio
    async def test_hash_embedding_values(self):
        # ord('a') == 97
        assert await HashEmbedding().embed(["a"]) == [[97 % 7, 97 % 11, 97 % 13]]

    @pytest.mark.asyncio
    async def test_openai_embedding_batches_request(self):
        client = Mock()
        client.embeddings.create = AsyncMock(
            return_value=Mock(data=[Mock(embedding=[0.1, 0.2]), Mock(embedding=[0.3, 0.4])])
        )
        embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=2, client=client)

        vectors = await embedder.embed(["alpha", "beta"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        client.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input=["alpha", "beta"], dimensions=2
        )

    @pytest.mark.asyncio
    async def test_openai_embedding_empty_input(self):
        client = Mock()
        client.embeddings.create = AsyncMock()
        embedder = OpenAIEmbedding(client=client)

        assert await embedder.embed([]) == []
        client.embeddings.create.assert_not_awaited()
