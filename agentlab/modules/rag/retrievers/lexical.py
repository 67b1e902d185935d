"""
BM25 lexical retrieval over chunk text.

Scores with ``rank_bm25.BM25Okapi`` using the Lucene IDF
``log(1 + (N - n + 0.5) / (n + 0.5))``, which stays positive for terms found
in half or more of the chunks. Only chunks sharing at least one token with
the query are candidates, so a query with no overlap returns nothing. Ties
keep corpus order.
"""

import math
import re

from rank_bm25 import BM25Okapi

from agentlab.utils.logger import get_logger

from ..models import Chunk, RetrievedChunk

logger = get_logger(__name__)

TOKEN_PATTERN = re.compile(r"\w+")


class LuceneBM25(BM25Okapi):
    """BM25Okapi term weighting with a strictly positive IDF."""

    def _calc_idf(self, nd):
        for word, freq in nd.items():
            self.idf[word] = math.log(1 + (self.corpus_size - freq + 0.5) / (freq + 0.5))


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens."""
    return TOKEN_PATTERN.findall(text.lower())


def bm25_scores(query: str, chunks: list[Chunk]) -> dict[str, float]:
    """
    Score every candidate chunk against ``query``.

    Returns:
        Mapping chunk_id -> BM25 score, in corpus order, holding only chunks
        that share a token with the query
    """
    query_tokens = tokenize(query)
    if not query_tokens:
        logger.warning("Query is empty after BM25 tokenization")
        return {}
    if not chunks:
        return {}

    corpus_tokens = [tokenize(chunk.text) for chunk in chunks]
    # BM25 divides by the average document length
    if not any(corpus_tokens):
        return {}

    index = LuceneBM25(corpus_tokens)
    scores = index.get_scores(query_tokens)
    query_set = set(query_tokens)

    return {
        chunk.chunk_id: float(scores[i])
        for i, chunk in enumerate(chunks)
        if query_set.intersection(corpus_tokens[i])
    }


def rank_scores(scores: dict[str, float], texts: dict[str, str], top_k: int) -> list[RetrievedChunk]:
    """Sort by descending score (stable), cut to ``top_k`` and assign 1-based ranks."""
    ordered = sorted(scores.items(), key=lambda item: item[1], reverse=True)[: max(0, top_k)]
    return [
        RetrievedChunk(chunk_id=chunk_id, text=texts.get(chunk_id, ""), score=score, rank=i + 1)
        for i, (chunk_id, score) in enumerate(ordered)
    ]


class LexicalRetriever:
    """BM25 ranking of chunks for a query."""

    async def search(self, query: str, chunks: list[Chunk], top_k: int) -> list[RetrievedChunk]:
        scores = bm25_scores(query, chunks)
        results = rank_scores(scores, {c.chunk_id: c.text for c in chunks}, top_k)

        logger.debug(
            f"BM25 search returned {len(results)} of {len(chunks)} chunks",
            extra={"top_k": top_k, "candidates": len(scores)},
        )
        return results
