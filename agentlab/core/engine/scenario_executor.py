"""
Scenario executor.

Runs the steps of a ScenarioTask strictly in order, wiring values from earlier
step outputs (or the scenario's initial input) into later step inputs. The
first failing step fails the whole scenario; later steps never run.
"""

import time
from datetime import datetime
from typing import Any

from agentlab.core.contracts import Runner, TraceRecorder, format_stack
from agentlab.core.errors import MissingStepConfigError, RunnerNotFoundError
from agentlab.core.registry import RunnerRegistry
from agentlab.models import (
    AtomicTask,
    InputBinding,
    Provenance,
    RunError,
    RunMetrics,
    RunRecord,
    RunStatus,
    ScenarioTask,
    StepSummary,
)
from agentlab.models.artifact import utc_now
from agentlab.utils.logger import get_logger
from agentlab.utils.paths import ValueArena, parse_source, set_by_path

logger = get_logger(__name__)

RUNNER_ID_KEY = "runner_id"


class _ScenarioState:
    """Mutable bookkeeping for one scenario pass."""

    def __init__(self, scenario: ScenarioTask):
        self.trace = TraceRecorder()
        self.steps: list[StepSummary] = []
        self.arena = ValueArena(initial_input=dict(scenario.scenario_input))
        self.latency = 0.0
        self.tokens = 0
        self.cost = 0.0

    def accumulate(self, metrics: RunMetrics) -> None:
        self.latency += metrics.latency
        self.tokens += metrics.tokens or 0
        self.cost += metrics.cost or 0.0

    def metrics(self) -> RunMetrics:
        return RunMetrics(latency=self.latency, tokens=self.tokens, cost=self.cost)


class ScenarioExecutor:
    """
    Sequential multi-step runner.

    Per-step configuration is a mapping keyed by step id. Each entry must
    carry ``runner_id``; every other key is handed to that runner as its
    configuration.

    Example:
        executor = ScenarioExecutor()
        run = await executor.execute(
            scenario,
            runner_registry,
            {
                "step-1": {"runner_id": "intent.llm", "intents": ["greeting"]},
                "step-2": {"runner_id": "dialogue.llm"},
            },
        )
    """

    id = "scenario-executor"
    version = "1.0.0"

    async def execute(
        self,
        scenario: ScenarioTask,
        runner_registry: RunnerRegistry,
        config: dict[str, dict[str, Any]],
    ) -> RunRecord:
        """
        Execute a scenario.

        Args:
            scenario: Scenario to run
            runner_registry: Registry the step runners are resolved from
            config: Per-step configuration keyed by step id

        Returns:
            RunRecord with ``task_type == "scenario"`` and one StepSummary per
            executed step. Never raises for step or precondition failures.
        """
        started_at = utc_now()
        state = _ScenarioState(scenario)
        config = config or {}

        state.trace.add(
            "scenario_started",
            {
                "scenario_id": scenario.id,
                "scenario_name": scenario.name,
                "step_count": len(scenario.steps),
            },
        )

        try:
            # Every step's configuration and runner are checked before any step runs
            plan = [
                (step, *self._resolve_step(step, runner_registry, config))
                for step in scenario.steps
            ]

            for step, runner, runner_config in plan:
                failed = await self._run_step(scenario, step, runner, runner_config, state)
                if failed is not None:
                    return self._record(
                        scenario, started_at, state, config,
                        status=RunStatus.FAILED, error=failed,
                    )

            state.trace.add(
                "scenario_completed",
                {"total_steps": len(scenario.steps), "total_latency": state.latency},
            )
            final_output = (
                state.arena.step_outputs.get(scenario.steps[-1].id) if scenario.steps else None
            )
            logger.info(
                f"Scenario {scenario.id} completed",
                extra={"scenario_id": scenario.id, "steps": len(state.steps)},
            )
            return self._record(
                scenario, started_at, state, config,
                status=RunStatus.COMPLETED, output=final_output,
            )

        except Exception as e:
            logger.log_error_with_context(
                f"Scenario {scenario.id} aborted", e, scenario_id=scenario.id
            )
            state.trace.add(
                "scenario_error",
                {"error": str(e), "stack": format_stack(e)},
                level="error",
            )
            return self._record(
                scenario, started_at, state, config,
                status=RunStatus.FAILED,
                error=RunError(
                    message=str(e),
                    step=getattr(e, "step_id", None),
                    stack=format_stack(e),
                ),
            )

    async def _run_step(
        self,
        scenario: ScenarioTask,
        step: AtomicTask,
        runner: Runner,
        runner_config: dict[str, Any],
        state: _ScenarioState,
    ) -> RunError | None:
        """Run one step. Returns the error when the step failed."""
        step_start = time.perf_counter()
        state.trace.add(
            "step_started",
            {"step_id": step.id, "step_name": step.name, "runner_id": runner.id},
            step=step.id,
        )

        prepared = self.apply_input_map(step, scenario.input_map.get(step.id, []), state.arena)

        try:
            result = await runner.execute(prepared, runner_config)
        except Exception as e:
            logger.log_error_with_context(
                f"Step {step.id} raised", e, scenario_id=scenario.id, step_id=step.id
            )
            error = RunError(message=str(e) or type(e).__name__, step=step.id, stack=format_stack(e))
            return self._fail_step(step, error, step_start, state)

        state.arena.record(step.id, result.output)
        state.accumulate(result.metrics)
        state.trace.extend([event.model_copy(update={"step": step.id}) for event in result.trace])

        if result.status == RunStatus.FAILED:
            error = RunError(
                message=result.error.message if result.error else "Step execution failed",
                step=step.id,
                stack=result.error.stack if result.error else None,
            )
            return self._fail_step(step, error, step_start, state)

        latency = (time.perf_counter() - step_start) * 1000
        state.steps.append(
            StepSummary(
                step_id=step.id,
                step_name=step.name,
                status="completed",
                latency=latency,
                output=result.output,
            )
        )
        state.trace.add("step_completed", {"step_id": step.id, "latency": latency}, step=step.id)
        return None

    def _fail_step(
        self,
        step: AtomicTask,
        error: RunError,
        step_start: float,
        state: _ScenarioState,
    ) -> RunError:
        state.steps.append(
            StepSummary(
                step_id=step.id,
                step_name=step.name,
                status="failed",
                latency=(time.perf_counter() - step_start) * 1000,
                error=error.message,
            )
        )
        state.trace.add(
            "step_failed", {"step_id": step.id, "error": error.message}, level="error", step=step.id
        )
        state.trace.add(
            "scenario_failed",
            {"failed_step": step.id, "error": error.message},
            level="error",
        )
        logger.warning(
            f"Scenario step {step.id} failed: {error.message}",
            extra={"step_id": step.id},
        )
        return error

    @staticmethod
    def _resolve_step(
        step: AtomicTask,
        runner_registry: RunnerRegistry,
        config: dict[str, dict[str, Any]],
    ) -> tuple[Runner, dict[str, Any]]:
        step_config = config.get(step.id)
        if not step_config:
            raise MissingStepConfigError(step.id)

        runner_config = dict(step_config)
        runner_id = runner_config.pop(RUNNER_ID_KEY, None)
        if not runner_id:
            raise MissingStepConfigError(step.id, detail=f"Missing {RUNNER_ID_KEY} for step")

        runner = runner_registry.get(runner_id)
        if runner is None:
            raise RunnerNotFoundError(runner_id, step_id=step.id)

        return runner, runner_config

    @staticmethod
    def apply_input_map(
        step: AtomicTask,
        bindings: list[InputBinding],
        arena: ValueArena,
    ) -> AtomicTask:
        """
        Return ``step`` with every binding's value written into its input.

        Unknown source prefixes are skipped. A source that cannot be resolved
        (including a reference to a step that has not run yet) writes None.
        """
        if not bindings:
            return step

        new_input: dict[str, Any] = dict(step.input) if isinstance(step.input, dict) else {}
        for binding in bindings:
            ref = parse_source(binding.source)
            if ref is None:
                logger.warning(
                    f"Skipping binding with unknown source: {binding.source}",
                    extra={"step_id": step.id},
                )
                continue
            new_input = set_by_path(new_input, binding.to, arena.resolve(ref))

        return step.model_copy(update={"input": new_input})

    def _record(
        self,
        scenario: ScenarioTask,
        started_at: datetime,
        state: _ScenarioState,
        config: dict[str, Any],
        status: RunStatus,
        output: Any = None,
        error: RunError | None = None,
    ) -> RunRecord:
        return RunRecord(
            task_id=scenario.id,
            task_type="scenario",
            capability_type="scenario",
            status=status,
            output=output,
            error=error,
            metrics=state.metrics(),
            trace=list(state.trace.events),
            steps=list(state.steps),
            started_at=started_at,
            completed_at=utc_now(),
            provenance=Provenance(
                runner_id=self.id,
                runner_version=self.version,
                config=config,
            ),
        )
