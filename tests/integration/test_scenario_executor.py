"""
Integration Tests for the Scenario Executor

Tests ordered step execution, input wiring, failure handling and metric
accumulation with real runners and small in-test runners.
"""

import json
from typing import Any
from uuid import uuid4

import pytest

from agentlab.core.contracts import Runner, TraceRecorder
from agentlab.core.engine import ScenarioExecutor
from agentlab.models import AtomicTask, InputBinding, RunRecord, RunStatus, ScenarioTask
from agentlab.models.artifact import utc_now
from agentlab.modules import IntentLLMRunner


class EchoRunner(Runner):
    """Returns its input as output; fails when configured to."""

    id = "test.echo"
    type = "echo"

    def __init__(self):
        self.executed: list[str] = []

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        self.executed.append(task.id)
        trace = TraceRecorder()
        trace.add("echoed", {"keys": sorted(task.input or {})})
        if config.get("fail"):
            return self._failed_record(
                str(uuid4()), task, utc_now(), trace, ValueError("echo refused"), config
            )
        return self._completed_record(
            str(uuid4()), task, utc_now(), trace, output=task.input, config=config, tokens=5, cost=0.01
        )


class RaisingRunner(Runner):
    id = "test.raising"
    type = "echo"

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        raise RuntimeError("runner crashed")


def echo_step(step_id: str, **task_input: Any) -> AtomicTask:
    return AtomicTask(id=step_id, type="echo", input=task_input)


def bind(source: str, to: str) -> InputBinding:
    return InputBinding.model_validate({"from": source, "to": to})


@pytest.fixture
def echo_runner():
    return EchoRunner()


@pytest.fixture
def registry(runner_registry, echo_runner, fake_llm):
    runner_registry.register(echo_runner)
    runner_registry.register(RaisingRunner())
    runner_registry.register(
        IntentLLMRunner(fake_llm(json.dumps({"intent": "greeting", "confidence": 0.9}), token_usage=7))
    )
    return runner_registry


@pytest.fixture
def executor():
    return ScenarioExecutor()


class TestInputWiring:
    """Tests for step-to-step data flow."""

    @pytest.mark.asyncio
    async def test_intent_flows_into_next_step(self, executor, registry):
        scenario = ScenarioTask(
            id="scenario-1",
            steps=[
                AtomicTask(id="classify", type="intent", input={"text": "Hello there"}),
                echo_step("respond", note="keep"),
            ],
            input_map={
                "respond": [
                    bind("step:classify:intent", "detected_intent"),
                    bind("input:user_name", "profile.name"),
                ]
            },
            metadata={"scenario_input": {"user_name": "Ada"}},
        )
        config = {
            "classify": {"runner_id": "intent.llm", "intents": ["greeting", "farewell"]},
            "respond": {"runner_id": "test.echo"},
        }

        run = await executor.execute(scenario, registry, config)

        assert run.status == RunStatus.COMPLETED
        assert run.task_type == "scenario"
        assert run.output == {"note": "keep", "detected_intent": "greeting", "profile": {"name": "Ada"}}
        assert [s.step_id for s in run.steps] == ["classify", "respond"]
        assert run.steps[0].output["intent"] == "greeting"

    @pytest.mark.asyncio
    async def test_unresolvable_sources_write_none(self, executor, registry):
        scenario = ScenarioTask(
            id="scenario-2",
            steps=[echo_step("first"), echo_step("second")],
            input_map={
                "first": [bind("step:second:value", "forward"), bind("input:missing", "absent")],
            },
        )
        config = {"first": {"runner_id": "test.echo"}, "second": {"runner_id": "test.echo"}}

        run = await executor.execute(scenario, registry, config)

        assert run.steps[0].output == {"forward": None, "absent": None}

    @pytest.mark.asyncio
    async def test_unknown_prefix_skipped(self, executor, registry):
        scenario = ScenarioTask(
            id="scenario-3",
            steps=[echo_step("only", kept=True)],
            input_map={"only": [bind("env:HOME", "home")]},
        )

        run = await executor.execute(scenario, registry, {"only": {"runner_id": "test.echo"}})

        assert run.output == {"kept": True}


class TestFailures:
    """Tests for first-failure-wins semantics."""

    @pytest.mark.asyncio
    async def test_step_failure_stops_scenario(self, executor, registry, echo_runner):
        scenario = ScenarioTask(
            id="scenario-4",
            steps=[echo_step("s1"), echo_step("s2"), echo_step("s3")],
        )
        config = {
            "s1": {"runner_id": "test.echo"},
            "s2": {"runner_id": "test.echo", "fail": True},
            "s3": {"runner_id": "test.echo"},
        }

        run = await executor.execute(scenario, registry, config)

        assert run.status == RunStatus.FAILED
        assert run.error.step == "s2"
        assert run.error.message == "echo refused"
        assert [(s.step_id, s.status) for s in run.steps] == [("s1", "completed"), ("s2", "failed")]
        assert echo_runner.executed == ["s1", "s2"]
        assert run.trace[-1].event == "scenario_failed"

    @pytest.mark.asyncio
    async def test_runner_exception_becomes_step_failure(self, executor, registry):
        scenario = ScenarioTask(id="scenario-5", steps=[echo_step("boom")])

        run = await executor.execute(scenario, registry, {"boom": {"runner_id": "test.raising"}})

        assert run.status == RunStatus.FAILED
        assert run.error.step == "boom"
        assert run.error.message == "runner crashed"
        assert run.steps[0].status == "failed"

    @pytest.mark.asyncio
    async def test_missing_config_runs_nothing(self, executor, registry, echo_runner):
        scenario = ScenarioTask(id="scenario-6", steps=[echo_step("s1"), echo_step("s2")])

        run = await executor.execute(scenario, registry, {"s1": {"runner_id": "test.echo"}})

        assert run.status == RunStatus.FAILED
        assert "s2" in run.error.message
        assert run.error.step == "s2"
        assert run.steps == []
        assert echo_runner.executed == []

    @pytest.mark.asyncio
    async def test_missing_runner_id(self, executor, registry):
        scenario = ScenarioTask(id="scenario-7", steps=[echo_step("s1")])

        run = await executor.execute(scenario, registry, {"s1": {"note": "no runner"}})

        assert run.status == RunStatus.FAILED
        assert "runner_id" in run.error.message

    @pytest.mark.asyncio
    async def test_unknown_runner(self, executor, registry):
        scenario = ScenarioTask(id="scenario-8", steps=[echo_step("s1")])

        run = await executor.execute(scenario, registry, {"s1": {"runner_id": "test.missing"}})

        assert run.status == RunStatus.FAILED
        assert run.error.message == "Runner not found: test.missing"
        assert run.error.step == "s1"


class TestBookkeeping:
    @pytest.mark.asyncio
    async def test_empty_scenario_completes(self, executor, registry):
        run = await executor.execute(ScenarioTask(id="empty"), registry, {})

        assert run.status == RunStatus.COMPLETED
        assert run.output is None
        assert run.steps == []
        assert [e.event for e in run.trace] == ["scenario_started", "scenario_completed"]

    @pytest.mark.asyncio
    async def test_trace_tagged_with_step_ids(self, executor, registry):
        scenario = ScenarioTask(id="scenario-9", steps=[echo_step("a"), echo_step("b")])
        config = {"a": {"runner_id": "test.echo"}, "b": {"runner_id": "test.echo"}}

        run = await executor.execute(scenario, registry, config)

        echoed = [e for e in run.trace if e.event == "echoed"]
        assert [e.step for e in echoed] == ["a", "b"]
        assert run.trace[0].step is None

    @pytest.mark.asyncio
    async def test_metrics_accumulate(self, executor, registry):
        scenario = ScenarioTask(
            id="scenario-10",
            steps=[AtomicTask(id="classify", type="intent", input={"text": "Hi"}), echo_step("next")],
        )
        config = {
            "classify": {"runner_id": "intent.llm", "intents": ["greeting"]},
            "next": {"runner_id": "test.echo"},
        }

        run = await executor.execute(scenario, registry, config)

        assert run.metrics.tokens == 12
        assert run.metrics.cost == pytest.approx(7 / 1000 * 0.002 + 0.01)
        assert run.metrics.latency >= 0.0
