"""Chunk retrievers: lexical (BM25), vector (cosine) and hybrid."""

from .hybrid import HybridRetriever, min_max_normalize
from .lexical import LexicalRetriever, bm25_scores, tokenize
from .vector import VectorRetriever
from .vector_index import InMemoryVectorIndex, cosine_similarity

__all__ = [
    "LexicalRetriever",
    "VectorRetriever",
    "HybridRetriever",
    "InMemoryVectorIndex",
    "bm25_scores",
    "cosine_similarity",
    "min_max_normalize",
    "tokenize",
]
