"""
Plugin contracts every capability module implements.

- Runner: executes an AtomicTask and returns a RunRecord with a full trace
- Evaluator: grades a RunRecord and returns ScoreRecords
- Reporter: derives structured reports from a run's output, artifacts and trace
"""

import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from agentlab.models import (
    ArtifactRecord,
    AtomicTask,
    Provenance,
    ReportRecord,
    RunError,
    RunMetrics,
    RunRecord,
    RunStatus,
    ScoreEvidence,
    ScoreRecord,
    ScoreValue,
    TraceEvent,
)
from agentlab.models.artifact import utc_now


class TraceRecorder:
    """Collects trace events in emission order."""

    def __init__(self, step: str | None = None):
        self.step = step
        self.events: list[TraceEvent] = []

    def add(
        self,
        event: str,
        data: Any = None,
        level: str = "info",
        step: str | None = None,
    ) -> TraceEvent:
        trace_event = TraceEvent(
            level=level,
            step=step if step is not None else self.step,
            event=event,
            data=data,
        )
        self.events.append(trace_event)
        return trace_event

    def extend(self, events: list[TraceEvent]) -> None:
        self.events.extend(events)

    def __len__(self) -> int:
        return len(self.events)


class Runner(ABC):
    """Base class for all execution units."""

    id: ClassVar[str]
    type: ClassVar[str]
    version: ClassVar[str] = "1.0.0"

    @abstractmethod
    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        """
        Execute a task.

        Args:
            task: Unit of work
            config: Runner-specific configuration

        Returns:
            RunRecord containing the complete trace
        """

    def _completed_record(
        self,
        run_id: str,
        task: AtomicTask,
        started_at: datetime,
        trace: TraceRecorder,
        output: Any,
        config: Any,
        tokens: int | None = None,
        cost: float | None = None,
        artifacts: list[ArtifactRecord] | None = None,
    ) -> RunRecord:
        completed_at = utc_now()
        return RunRecord(
            id=run_id,
            task_id=task.id,
            capability_type=task.type,
            status=RunStatus.COMPLETED,
            output=output,
            metrics=RunMetrics(
                latency=_elapsed_ms(started_at, completed_at),
                tokens=tokens,
                cost=cost,
            ),
            trace=list(trace.events),
            artifacts=artifacts or [],
            started_at=started_at,
            completed_at=completed_at,
            provenance=self._provenance(config),
        )

    def _failed_record(
        self,
        run_id: str,
        task: AtomicTask,
        started_at: datetime,
        trace: TraceRecorder,
        error: BaseException,
        config: Any,
        artifacts: list[ArtifactRecord] | None = None,
    ) -> RunRecord:
        trace.add("execution_failed", {"error": str(error)}, level="error")
        completed_at = utc_now()
        return RunRecord(
            id=run_id,
            task_id=task.id,
            capability_type=task.type,
            status=RunStatus.FAILED,
            error=RunError(message=str(error) or type(error).__name__, stack=format_stack(error)),
            metrics=RunMetrics(latency=_elapsed_ms(started_at, completed_at)),
            trace=list(trace.events),
            artifacts=artifacts or [],
            started_at=started_at,
            completed_at=completed_at,
            provenance=self._provenance(config),
        )

    def _provenance(self, config: Any) -> Provenance:
        return Provenance(
            runner_id=self.id,
            runner_version=self.version,
            config=config if config is not None else {},
        )


class Evaluator(ABC):
    """Base class for all scoring units."""

    id: ClassVar[str]
    metrics: ClassVar[list[str]]
    # None grades every capability type
    capability_type: ClassVar[str | None] = None

    def applies_to(self, task: AtomicTask) -> bool:
        return self.capability_type is None or task.type == self.capability_type

    @abstractmethod
    async def evaluate(
        self,
        run: RunRecord,
        task: AtomicTask,
        reports: list[ReportRecord] | None = None,
    ) -> list[ScoreRecord]:
        """
        Evaluate a run.

        Args:
            run: Run record to grade
            task: Task the run executed (holds ``expected``)
            reports: Reports produced for this run, if any

        Returns:
            One ScoreRecord per produced metric
        """

    def _score(
        self,
        run: RunRecord,
        metric: str,
        value: ScoreValue,
        target: str = "final",
        explanation: str | None = None,
        snippets: list[str] | None = None,
        alignment: dict[str, Any] | None = None,
        report_refs: list[str] | None = None,
    ) -> ScoreRecord:
        """Helper to create a score record."""
        evidence = None
        if any(item is not None for item in (explanation, snippets, alignment, report_refs)):
            evidence = ScoreEvidence(
                explanation=explanation,
                snippets=snippets,
                alignment=alignment,
                report_refs=report_refs,
            )
        return ScoreRecord(
            run_id=run.id,
            metric=metric,
            value=value,
            target=target,
            evidence=evidence,
            evaluator_id=self.id,
        )

    def _usage_scores(self, run: RunRecord) -> list[ScoreRecord]:
        """Latency, token and cost scores shared by every capability."""
        scores = [
            self._score(
                run,
                "latency",
                run.metrics.latency,
                target="global",
                explanation=f"Execution took {run.metrics.latency:.0f}ms",
            )
        ]
        if run.metrics.tokens is not None:
            scores.append(
                self._score(
                    run,
                    "tokens",
                    run.metrics.tokens,
                    target="global",
                    explanation=f"Used {run.metrics.tokens} tokens",
                )
            )
        if run.metrics.cost is not None:
            scores.append(
                self._score(
                    run,
                    "cost",
                    run.metrics.cost,
                    target="global",
                    explanation=f"Cost: ${run.metrics.cost:.4f}",
                )
            )
        return scores


@dataclass
class ReporterContext:
    """What a reporting unit may inspect."""

    run_output: Any = None
    artifacts: list[ArtifactRecord] = field(default_factory=list)
    trace: list[TraceEvent] = field(default_factory=list)

    @classmethod
    def from_run(cls, run: RunRecord) -> "ReporterContext":
        return cls(run_output=run.output, artifacts=list(run.artifacts), trace=list(run.trace))


class Reporter(ABC):
    """Base class for all reporting units."""

    id: ClassVar[str]
    types: ClassVar[list[str]]

    @abstractmethod
    async def run(self, run_id: str, context: ReporterContext) -> list[ReportRecord]:
        """Produce reports for a run."""


def format_stack(error: BaseException) -> str | None:
    if error.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _elapsed_ms(started_at: datetime, completed_at: datetime) -> float:
    return max(0.0, (completed_at - started_at).total_seconds() * 1000)
