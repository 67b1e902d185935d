"""Wire-stable artifact and report schema ids of the RAG pipeline."""

from agentlab.models import ArtifactSchema

RETRIEVED = "rag.retrieved"
RERANKED = "rag.reranked"
GENERATED = "rag.generated"
CITATIONS = "rag.citations"
EVIDENCE = "rag.evidence"

# Pipeline step ids that produce the artifacts above
STEP_CHUNK = "chunk"
STEP_RETRIEVE = "retrieve"
STEP_RERANK = "rerank"
STEP_GENERATE = "generate"

RAG_ARTIFACT_SCHEMAS: list[ArtifactSchema] = [
    ArtifactSchema(
        id=RETRIEVED,
        name="RetrievedChunks",
        description="Ranked chunks returned by the retriever",
    ),
    ArtifactSchema(
        id=RERANKED,
        name="RerankedChunks",
        description="Retrieved chunks reordered by a reranker",
    ),
    ArtifactSchema(
        id=GENERATED,
        name="GeneratedAnswer",
        description="Answer text with per-sentence citations",
    ),
    ArtifactSchema(
        id=CITATIONS,
        name="FinalCitations",
        description="Citations kept in the final answer",
    ),
]
