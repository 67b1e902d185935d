"""Retrieval-augmented generation capability."""

from .chunkers import (
    Chunker,
    DocumentChunker,
    FixedSizeChunker,
    SentenceChunker,
    SlidingWindowChunker,
    get_chunker,
)
from .definitions import register_rag_definitions
from .demo import RAG_DEMO_DATASET, RAG_DEMO_SEED, build_rag_demo_config, build_rag_demo_task
from .embeddings import EmbeddingAdapter, HashEmbedding, OpenAIEmbedding
from .evaluators import RagMetricsEvaluator
from .generators import (
    GenerationState,
    Generator,
    LLMGenerator,
    TemplateGenerator,
    get_generator,
    parse_generated_answer,
)
from .models import (
    Chunk,
    Citation,
    EvidenceLink,
    EvidenceMetrics,
    EvidenceReport,
    GeneratedAnswer,
    GeneratedSentence,
    GenerationResult,
    RagDocument,
    RetrievedChunk,
    UnsupportedLink,
)
from .pipeline import RagInput, RagPipelineRunner, RagRunnerConfig, resolve_top_k
from .reporters import RagEvidenceReporter, build_evidence_report
from .rerankers import LLMReranker, Reranker, SimpleReranker
from .retrievers import (
    HybridRetriever,
    InMemoryVectorIndex,
    LexicalRetriever,
    VectorRetriever,
)
from .schemas import CITATIONS, EVIDENCE, GENERATED, RAG_ARTIFACT_SCHEMAS, RERANKED, RETRIEVED

__all__ = [
    "RagPipelineRunner",
    "RagRunnerConfig",
    "RagInput",
    "resolve_top_k",
    "RagEvidenceReporter",
    "build_evidence_report",
    "RagMetricsEvaluator",
    "register_rag_definitions",
    "RAG_ARTIFACT_SCHEMAS",
    "RETRIEVED",
    "RERANKED",
    "GENERATED",
    "CITATIONS",
    "EVIDENCE",
    "RAG_DEMO_DATASET",
    "RAG_DEMO_SEED",
    "build_rag_demo_task",
    "build_rag_demo_config",
    "Chunker",
    "DocumentChunker",
    "SentenceChunker",
    "FixedSizeChunker",
    "SlidingWindowChunker",
    "get_chunker",
    "EmbeddingAdapter",
    "HashEmbedding",
    "OpenAIEmbedding",
    "LexicalRetriever",
    "VectorRetriever",
    "HybridRetriever",
    "InMemoryVectorIndex",
    "Reranker",
    "SimpleReranker",
    "LLMReranker",
    "Generator",
    "TemplateGenerator",
    "LLMGenerator",
    "GenerationState",
    "get_generator",
    "parse_generated_answer",
    "RagDocument",
    "Chunk",
    "RetrievedChunk",
    "Citation",
    "GeneratedSentence",
    "GeneratedAnswer",
    "GenerationResult",
    "EvidenceLink",
    "UnsupportedLink",
    "EvidenceMetrics",
    "EvidenceReport",
]
