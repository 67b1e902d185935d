"""
Evaluation engine.

Fixed pipeline, not configurable:
Execute -> Stamp provenance -> Report -> Evaluate -> Store

The engine knows nothing about capability semantics; it only resolves units
from registries, isolates plugin failures and persists the results.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from agentlab.core.contracts import Evaluator, ReporterContext
from agentlab.core.errors import RunnerNotFoundError, TypeMismatchError
from agentlab.core.registry import EvaluatorRegistry, ReporterRegistry, RunnerRegistry
from agentlab.models import (
    AtomicTask,
    ReportRecord,
    RunRecord,
    RunStatus,
    ScenarioTask,
    ScoreRecord,
    ScoreValue,
)
from agentlab.utils.fingerprint import (
    build_provenance_snapshot,
    create_config_hash,
    create_run_fingerprint,
)
from agentlab.utils.logger import clear_run_context, get_logger, set_run_context

from .scenario_executor import ScenarioExecutor
from .storage import Storage

logger = get_logger(__name__)

LOWER_IS_BETTER = frozenset({"latency", "cost"})


class EvalResult(BaseModel):
    """A run together with its scores."""

    model_config = ConfigDict(frozen=True)

    run: RunRecord
    scores: list[ScoreRecord] = Field(default_factory=list)

    @property
    def reports(self) -> list[ReportRecord]:
        return self.run.reports

    def score(self, metric: str) -> ScoreValue | None:
        """Value of the first score for ``metric``, if any."""
        for score in self.scores:
            if score.metric == metric:
                return score.value
        return None


class MetricComparison(BaseModel):
    """Side-by-side values of one metric across two runs."""

    metric: str
    value1: ScoreValue
    value2: ScoreValue
    diff: float | None = None
    improved: bool | None = None


class RunComparison(BaseModel):
    run1: EvalResult
    run2: EvalResult
    comparison: list[MetricComparison] = Field(default_factory=list)


class EvalEngine:
    """
    Core evaluation engine.

    Example:
        engine = EvalEngine(runner_registry, evaluator_registry, storage)
        result = await engine.evaluate_task(task, "rag.bm25", config)
        print(result.run.provenance.config_hash)
    """

    def __init__(
        self,
        runner_registry: RunnerRegistry,
        evaluator_registry: EvaluatorRegistry,
        storage: Storage,
        reporter_registry: ReporterRegistry | None = None,
        scenario_executor: ScenarioExecutor | None = None,
    ):
        self.runner_registry = runner_registry
        self.evaluator_registry = evaluator_registry
        self.reporter_registry = reporter_registry or ReporterRegistry()
        self.storage = storage
        self.scenario_executor = scenario_executor or ScenarioExecutor()

    async def evaluate_task(
        self,
        task: AtomicTask,
        runner_id: str,
        config: Any,
        evaluator_ids: list[str] | None = None,
    ) -> EvalResult:
        """
        Run one unit of work through the full pipeline.

        Args:
            task: Unit of work
            runner_id: Id of the execution unit to use
            config: Runner configuration
            evaluator_ids: Scoring units to apply (default: all registered)

        Returns:
            EvalResult with the stored run and its scores

        Raises:
            RunnerNotFoundError: If no runner is registered under ``runner_id``
            TypeMismatchError: If the runner's type differs from ``task.type``
        """
        runner = self.runner_registry.get(runner_id)
        if runner is None:
            raise RunnerNotFoundError(runner_id)
        if runner.type != task.type:
            raise TypeMismatchError(runner.type, task.type)

        start_time = time.perf_counter()
        set_run_context(task_id=task.id)
        try:
            run = await runner.execute(task, config)
            set_run_context(run_id=run.id)

            run = self._stamp_provenance(run, task, runner_id, config)
            run = await self._report(run)
            scores = await self._evaluate(run, task, evaluator_ids)
            await self._store(run, scores)

            logger.log_performance(
                "evaluate_task",
                (time.perf_counter() - start_time) * 1000,
                runner_id=runner_id,
                status=run.status.value,
                score_count=len(scores),
            )
            return EvalResult(run=run, scores=scores)
        finally:
            clear_run_context()

    async def evaluate_batch(
        self,
        tasks: list[AtomicTask],
        runner_id: str,
        config: Any,
        evaluator_ids: list[str] | None = None,
    ) -> list[EvalResult]:
        """
        Evaluate several units of work one after another.

        A failing unit of work is logged and skipped; only successful results
        are returned.
        """
        results: list[EvalResult] = []
        for task in tasks:
            try:
                results.append(await self.evaluate_task(task, runner_id, config, evaluator_ids))
            except Exception as e:
                logger.log_error_with_context(
                    f"Task {task.id} failed", e, task_id=task.id, runner_id=runner_id
                )

        logger.info(
            f"Batch finished: {len(results)}/{len(tasks)} tasks succeeded",
            extra={"runner_id": runner_id, "succeeded": len(results), "total": len(tasks)},
        )
        return results

    async def evaluate_scenario(
        self,
        scenario: ScenarioTask,
        config: dict[str, dict[str, Any]],
        evaluator_ids: list[str] | None = None,
    ) -> EvalResult:
        """
        Run a scenario, then stamp, report, evaluate and store it.

        Scoring units grade the scenario output against the last step, whose
        output is the scenario output.
        """
        set_run_context(task_id=scenario.id)
        try:
            run = await self.scenario_executor.execute(scenario, self.runner_registry, config)
            set_run_context(run_id=run.id)

            run = self._stamp_provenance(run, scenario, self.scenario_executor.id, config)
            run = await self._report(run)

            scores: list[ScoreRecord] = []
            if scenario.steps:
                scores = await self._evaluate(run, scenario.steps[-1], evaluator_ids)

            await self._store(run, scores)
            return EvalResult(run=run, scores=scores)
        finally:
            clear_run_context()

    async def get_run(self, run_id: str) -> RunRecord | None:
        return await self.storage.get_run(run_id)

    async def get_scores(self, run_id: str) -> list[ScoreRecord]:
        return await self.storage.get_scores(run_id)

    async def list_runs(
        self,
        task_id: str | None = None,
        task_type: str | None = None,
        status: RunStatus | str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[RunRecord]:
        return await self.storage.list_runs(
            task_id=task_id,
            task_type=task_type,
            status=status,
            limit=limit,
            offset=offset,
        )

    async def get_eval_result(self, run_id: str) -> EvalResult | None:
        """Stored run plus its scores, or None when the run is unknown."""
        run = await self.storage.get_run(run_id)
        if run is None:
            return None
        return EvalResult(run=run, scores=await self.storage.get_scores(run_id))

    async def compare_runs(self, run_id_1: str, run_id_2: str) -> RunComparison | None:
        """
        Compare two runs metric by metric.

        Scores are paired by metric name. For numeric values ``diff`` is
        ``value2 - value1`` and ``improved`` is True when the second run is
        better (lower latency/cost, higher everything else).

        Returns:
            RunComparison, or None if either run is unknown
        """
        result1 = await self.get_eval_result(run_id_1)
        result2 = await self.get_eval_result(run_id_2)
        if result1 is None or result2 is None:
            return None

        second_by_metric: dict[str, ScoreRecord] = {}
        for score in result2.scores:
            second_by_metric.setdefault(score.metric, score)

        comparison: list[MetricComparison] = []
        for score1 in result1.scores:
            score2 = second_by_metric.get(score1.metric)
            if score2 is None:
                continue

            item = MetricComparison(metric=score1.metric, value1=score1.value, value2=score2.value)
            if _is_number(score1.value) and _is_number(score2.value):
                diff = score2.value - score1.value
                improved = diff < 0 if score1.metric in LOWER_IS_BETTER else diff > 0
                item = item.model_copy(update={"diff": diff, "improved": improved})
            comparison.append(item)

        return RunComparison(run1=result1, run2=result2, comparison=comparison)

    def _stamp_provenance(
        self,
        run: RunRecord,
        task: AtomicTask | ScenarioTask,
        runner_id: str,
        config: Any,
    ) -> RunRecord:
        snapshot = build_provenance_snapshot(task, runner_id, config)
        provenance = run.provenance.model_copy(
            update={
                "config": config,
                "config_hash": create_config_hash(snapshot),
                "run_fingerprint": create_run_fingerprint(snapshot),
                "snapshot": snapshot,
            }
        )
        return run.model_copy(update={"provenance": provenance})

    async def _report(self, run: RunRecord) -> RunRecord:
        context = ReporterContext.from_run(run)
        reports: list[ReportRecord] = list(run.reports)

        for reporter in self.reporter_registry.list():
            try:
                reports.extend(await reporter.run(run.id, context))
            except Exception as e:
                logger.log_error_with_context(
                    f"Reporter {reporter.id} failed", e, reporter_id=reporter.id, run_id=run.id
                )

        return run.model_copy(update={"reports": reports})

    async def _evaluate(
        self,
        run: RunRecord,
        task: AtomicTask,
        evaluator_ids: list[str] | None,
    ) -> list[ScoreRecord]:
        scores: list[ScoreRecord] = []
        for evaluator in self._get_evaluators(evaluator_ids):
            try:
                scores.extend(await evaluator.evaluate(run, task, run.reports))
            except Exception as e:
                logger.log_error_with_context(
                    f"Evaluator {evaluator.id} failed", e, evaluator_id=evaluator.id, run_id=run.id
                )
        return scores

    async def _store(self, run: RunRecord, scores: list[ScoreRecord]) -> None:
        await self.storage.save_run(run)
        if scores:
            await self.storage.save_scores(scores)

    def _get_evaluators(self, evaluator_ids: list[str] | None) -> list[Evaluator]:
        if not evaluator_ids:
            return self.evaluator_registry.list()

        evaluators = []
        for evaluator_id in evaluator_ids:
            if not self.evaluator_registry.has(evaluator_id):
                logger.warning(
                    f"Skipping unknown evaluator: {evaluator_id}",
                    extra={"evaluator_id": evaluator_id},
                )
                continue
            evaluators.append(self.evaluator_registry.get(evaluator_id))
        return evaluators


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
