"""Data models of the RAG pipeline: documents, chunks, answers and evidence."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RagDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text: str


class Chunk(BaseModel):
    """Retrievable unit cut from a document."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    text: str
    doc_id: str


class RetrievedChunk(BaseModel):
    """Common ranked-chunk shape shared by retrievers and rerankers."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    text: str = ""
    score: float
    rank: int = Field(..., ge=1)


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True)

    chunk_id: str


class GeneratedSentence(BaseModel):
    model_config = ConfigDict(frozen=True)

    sentence_id: str
    text: str
    citations: list[Citation] = Field(default_factory=list)


class GeneratedAnswer(BaseModel):
    """Primary output of a RAG run."""

    model_config = ConfigDict(frozen=True)

    answer: str
    sentences: list[GeneratedSentence]
    generator_type: str
    sources_used: list[str] = Field(default_factory=list)

    @classmethod
    def from_sentences(
        cls,
        sentences: list[GeneratedSentence],
        generator_type: str,
        answer: str | None = None,
    ) -> "GeneratedAnswer":
        """Build an answer, deriving ``sources_used`` in first-citation order."""
        sources: list[str] = []
        for sentence in sentences:
            for citation in sentence.citations:
                if citation.chunk_id not in sources:
                    sources.append(citation.chunk_id)
        return cls(
            answer=answer if answer is not None else " ".join(s.text for s in sentences),
            sentences=sentences,
            generator_type=generator_type,
            sources_used=sources,
        )


class GenerationResult(BaseModel):
    """What a generator hands back to the pipeline."""

    answer: GeneratedAnswer
    token_usage: int = 0
    attempts: int = Field(default=1, ge=1, le=2)


class EvidenceLink(BaseModel):
    sentence_id: str
    chunk_id: str
    produced_by_step_id: str
    method: Literal["strict"] = "strict"


class UnsupportedLink(EvidenceLink):
    reason: Literal["missing_chunk"] = "missing_chunk"


class EvidenceMetrics(BaseModel):
    citation_precision: float
    hallucination_rate: float
    supported_sentence_rate: float
    unlinked_sentence_rate: float


EvidenceTaxonomy = Literal["ok", "retrieval_failed", "no_citations", "unsupported_citations"]


class EvidenceReport(BaseModel):
    """Payload of a ``rag.evidence`` report."""

    total_sentences: int
    sentences_with_citations: int
    total_citations: int
    valid_citations: int
    sentences: list[GeneratedSentence]
    supported: list[EvidenceLink]
    unsupported: list[UnsupportedLink]
    unlinked_sentences: list[GeneratedSentence]
    metrics: EvidenceMetrics
    taxonomy: EvidenceTaxonomy
