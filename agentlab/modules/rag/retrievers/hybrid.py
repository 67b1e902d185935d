"""Hybrid retrieval: weighted sum of BM25 and vector scores."""

from agentlab.config.settings import get_settings
from agentlab.utils.logger import get_logger

from ..embeddings import EmbeddingAdapter
from ..models import Chunk, RetrievedChunk
from .lexical import bm25_scores, rank_scores
from .vector import vector_scores

logger = get_logger(__name__)


def min_max_normalize(scores: dict[str, float]) -> dict[str, float]:
    """
    Rescale scores into [0, 1].

    When every score is equal each present key maps to 1.0: being scored at
    all already marks a match, while absent keys count as 0.
    """
    if not scores:
        return {}

    low = min(scores.values())
    high = max(scores.values())
    if high == low:
        return {key: 1.0 for key in scores}
    return {key: (value - low) / (high - low) for key, value in scores.items()}


class HybridRetriever:
    """
    Linear combination of lexical and vector relevance.

    Each score set is min-max normalised on its own, then combined as
    ``bm25_weight * bm25 + vector_weight * vector``. A chunk missing from one
    set (e.g. no shared query token) contributes 0 for that component.

    Example:
        retriever = HybridRetriever(HashEmbedding(), bm25_weight=0.7, vector_weight=0.3)
        results = await retriever.search("What is Alpha?", chunks, top_k=3)
    """

    def __init__(
        self,
        embedder: EmbeddingAdapter,
        bm25_weight: float | None = None,
        vector_weight: float | None = None,
    ):
        settings = get_settings()
        self.embedder = embedder
        self.bm25_weight = settings.rag_bm25_weight if bm25_weight is None else bm25_weight
        self.vector_weight = settings.rag_vector_weight if vector_weight is None else vector_weight

    async def search(self, query: str, chunks: list[Chunk], top_k: int) -> list[RetrievedChunk]:
        lexical = min_max_normalize(bm25_scores(query, chunks))
        vector = min_max_normalize(await vector_scores(self.embedder, query, chunks))

        combined = {
            chunk.chunk_id: self.bm25_weight * lexical.get(chunk.chunk_id, 0.0)
            + self.vector_weight * vector.get(chunk.chunk_id, 0.0)
            for chunk in chunks
        }
        results = rank_scores(combined, {c.chunk_id: c.text for c in chunks}, top_k)

        logger.debug(
            f"Hybrid search returned {len(results)} of {len(chunks)} chunks",
            extra={"bm25_weight": self.bm25_weight, "vector_weight": self.vector_weight},
        )
        return results
