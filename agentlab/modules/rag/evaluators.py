"""Scoring unit for RAG runs."""

from agentlab.core.contracts import Evaluator
from agentlab.models import AtomicTask, ReportRecord, RunRecord, ScoreRecord
from agentlab.utils.logger import get_logger

from .models import EvidenceReport
from .reporters import build_evidence_report
from .schemas import EVIDENCE

logger = get_logger(__name__)


class RagMetricsEvaluator(Evaluator):
    """
    Reduces the evidence report to citation precision and hallucination rate.

    Uses the ``rag.evidence`` report handed in by the engine and references
    it; without one the report is rebuilt from the run's artifacts. Failed
    runs and runs without a generated answer only get usage scores.
    """

    id = "rag.metrics"
    metrics = ["citation_precision", "hallucination_rate", "latency", "tokens", "cost"]
    capability_type = "rag"

    async def evaluate(
        self,
        run: RunRecord,
        task: AtomicTask,
        reports: list[ReportRecord] | None = None,
    ) -> list[ScoreRecord]:
        if not self.applies_to(task):
            return []

        if not run.succeeded:
            return self._usage_scores(run)

        report_refs = None
        evidence_report = next(
            (r for r in reports or [] if r.type == EVIDENCE and r.run_id == run.id), None
        )
        if evidence_report is not None:
            report = EvidenceReport.model_validate(evidence_report.payload)
            report_refs = [evidence_report.id]
        else:
            report = build_evidence_report(run.artifacts)

        if report is None:
            logger.debug(f"Run {run.id} has no generated answer to score", extra={"run_id": run.id})
            return self._usage_scores(run)

        alignment = {
            "total_citations": report.total_citations,
            "supported": len(report.supported),
            "unsupported": len(report.unsupported),
            "unlinked_sentences": len(report.unlinked_sentences),
            "taxonomy": report.taxonomy,
        }
        unsupported_snippets = [
            f"{link.sentence_id} -> {link.chunk_id} ({link.reason})" for link in report.unsupported
        ]

        scores = [
            self._score(
                run,
                "citation_precision",
                report.metrics.citation_precision,
                explanation=(
                    f"{len(report.supported)}/{report.total_citations} citations point at "
                    "retrieved chunks"
                ),
                alignment=alignment,
                report_refs=report_refs,
            ),
            self._score(
                run,
                "hallucination_rate",
                report.metrics.hallucination_rate,
                explanation=(
                    f"{len(report.unsupported)}/{report.total_citations} citations point at "
                    "chunks that were not retrieved"
                ),
                snippets=unsupported_snippets or None,
                alignment=alignment,
                report_refs=report_refs,
            ),
        ]
        scores.extend(self._usage_scores(run))
        return scores
