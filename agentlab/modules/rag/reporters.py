"""
Evidence linking for RAG runs.

Links every citation in the generated answer to the chunk set the answer was
generated from (the reranked set when present, else the retrieved set):

- supported: the cited chunk is in that set
- unsupported: it is not (reason ``missing_chunk``)
- unlinked: the sentence carries no citation at all
"""

from agentlab.core.contracts import Reporter, ReporterContext
from agentlab.models import ArtifactRecord, ReportRecord
from agentlab.utils.logger import get_logger

from .models import (
    EvidenceLink,
    EvidenceMetrics,
    EvidenceReport,
    EvidenceTaxonomy,
    GeneratedSentence,
    UnsupportedLink,
)
from .schemas import EVIDENCE, GENERATED, RERANKED, RETRIEVED

logger = get_logger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _last_artifact(artifacts: list[ArtifactRecord], schema_id: str) -> ArtifactRecord | None:
    for artifact in reversed(artifacts):
        if artifact.schema_id == schema_id:
            return artifact
    return None


def source_chunk_ids(artifacts: list[ArtifactRecord]) -> list[str]:
    """Chunk ids generation could draw on: reranked set if present, else retrieved set."""
    source = _last_artifact(artifacts, RERANKED) or _last_artifact(artifacts, RETRIEVED)
    if source is None:
        return []
    return [
        chunk["chunk_id"]
        for chunk in source.payload.get("chunks", [])
        if isinstance(chunk, dict) and "chunk_id" in chunk
    ]


def evidence_metrics(
    total_sentences: int,
    total_citations: int,
    supported: list[EvidenceLink],
    unsupported: list[UnsupportedLink],
    sentences: list[GeneratedSentence],
    unlinked: list[GeneratedSentence],
) -> EvidenceMetrics:
    """
    Headline rates of an evidence report.

    With zero citations precision defaults to 1.0 and hallucination to 0.0;
    with zero sentences both sentence rates are 0.0.
    """
    unsupported_sentences = {link.sentence_id for link in unsupported}
    fully_supported = [
        s for s in sentences if s.citations and s.sentence_id not in unsupported_sentences
    ]

    return EvidenceMetrics(
        citation_precision=_clamp(len(supported) / total_citations) if total_citations else 1.0,
        hallucination_rate=_clamp(len(unsupported) / total_citations) if total_citations else 0.0,
        supported_sentence_rate=(
            _clamp(len(fully_supported) / total_sentences) if total_sentences else 0.0
        ),
        unlinked_sentence_rate=_clamp(len(unlinked) / total_sentences) if total_sentences else 0.0,
    )


def build_evidence_report(artifacts: list[ArtifactRecord]) -> EvidenceReport | None:
    """
    Link the generated answer's citations to the source chunk set.

    Unknown artifact schema ids are ignored.

    Returns:
        EvidenceReport, or None when no ``rag.generated`` artifact exists
    """
    generated = _last_artifact(artifacts, GENERATED)
    if generated is None:
        return None

    chunk_ids = source_chunk_ids(artifacts)
    allowed = set(chunk_ids)
    sentences = [
        GeneratedSentence.model_validate(sentence)
        for sentence in generated.payload.get("sentences", [])
    ]

    supported: list[EvidenceLink] = []
    unsupported: list[UnsupportedLink] = []
    unlinked: list[GeneratedSentence] = []
    total_citations = 0

    for sentence in sentences:
        if not sentence.citations:
            unlinked.append(sentence)
            continue

        for citation in sentence.citations:
            total_citations += 1
            if citation.chunk_id in allowed:
                supported.append(
                    EvidenceLink(
                        sentence_id=sentence.sentence_id,
                        chunk_id=citation.chunk_id,
                        produced_by_step_id=generated.produced_by_step_id,
                    )
                )
            else:
                unsupported.append(
                    UnsupportedLink(
                        sentence_id=sentence.sentence_id,
                        chunk_id=citation.chunk_id,
                        produced_by_step_id=generated.produced_by_step_id,
                    )
                )

    taxonomy: EvidenceTaxonomy = "ok"
    if not chunk_ids:
        taxonomy = "retrieval_failed"
    elif total_citations == 0:
        taxonomy = "no_citations"
    elif unsupported:
        taxonomy = "unsupported_citations"

    return EvidenceReport(
        total_sentences=len(sentences),
        sentences_with_citations=len(sentences) - len(unlinked),
        total_citations=total_citations,
        valid_citations=len(supported),
        sentences=sentences,
        supported=supported,
        unsupported=unsupported,
        unlinked_sentences=unlinked,
        metrics=evidence_metrics(
            len(sentences), total_citations, supported, unsupported, sentences, unlinked
        ),
        taxonomy=taxonomy,
    )


class RagEvidenceReporter(Reporter):
    """Produces one ``rag.evidence`` report for runs that generated an answer."""

    id = "rag.evidence"
    types = [EVIDENCE]

    async def run(self, run_id: str, context: ReporterContext) -> list[ReportRecord]:
        report = build_evidence_report(context.artifacts)
        if report is None:
            return []

        logger.debug(
            f"Evidence report for run {run_id}: {report.taxonomy}",
            extra={
                "run_id": run_id,
                "supported": len(report.supported),
                "unsupported": len(report.unsupported),
            },
        )
        return [ReportRecord(run_id=run_id, type=EVIDENCE, payload=report.model_dump())]
