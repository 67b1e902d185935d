"""Embedding-based retrieval."""

from agentlab.utils.logger import get_logger

from ..embeddings import EmbeddingAdapter
from ..models import Chunk, RetrievedChunk
from .vector_index import InMemoryVectorIndex

logger = get_logger(__name__)


async def vector_scores(
    embedder: EmbeddingAdapter,
    query: str,
    chunks: list[Chunk],
) -> dict[str, float]:
    """Cosine score of every chunk against ``query``, best first."""
    if not chunks:
        return {}

    vectors = await embedder.embed([chunk.text for chunk in chunks])
    index = InMemoryVectorIndex()
    for chunk, vector in zip(chunks, vectors):
        index.add(chunk.chunk_id, vector)

    query_vector = (await embedder.embed([query]))[0]
    return dict(index.search(query_vector, len(chunks)))


class VectorRetriever:
    """Ranks chunks by cosine similarity of their embeddings to the query embedding."""

    def __init__(self, embedder: EmbeddingAdapter):
        self.embedder = embedder

    async def search(self, query: str, chunks: list[Chunk], top_k: int) -> list[RetrievedChunk]:
        scores = await vector_scores(self.embedder, query, chunks)
        texts = {chunk.chunk_id: chunk.text for chunk in chunks}

        results = [
            RetrievedChunk(chunk_id=chunk_id, text=texts[chunk_id], score=score, rank=i + 1)
            for i, (chunk_id, score) in enumerate(list(scores.items())[: max(0, top_k)])
        ]
        logger.debug(f"Vector search returned {len(results)} of {len(chunks)} chunks")
        return results
