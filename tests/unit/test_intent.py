"""
Unit Tests for Intent Recognition

Tests IntentLLMRunner, response parsing and IntentMetricsEvaluator.
"""

import json

import pytest

from agentlab.modules.intent import (
    IntentLLMRunner,
    IntentMetricsEvaluator,
    IntentRunnerConfig,
    build_system_prompt,
    parse_intent_response,
)


def intent_reply(intent: str, confidence: float, reasoning: str = "Friendly opener") -> str:
    return json.dumps({"intent": intent, "confidence": confidence, "reasoning": reasoning})


class TestPrompt:
    def test_lists_intents_and_examples(self):
        config = IntentRunnerConfig(
            intents=["greeting", "farewell"], examples={"greeting": ["hi", "hello"]}
        )
        prompt = build_system_prompt(config)

        assert "- greeting\n- farewell" in prompt
        assert "- greeting: hi, hello" in prompt
        assert "ONLY the JSON object" in prompt


class TestParseIntentResponse:
    def test_valid(self):
        output = parse_intent_response(intent_reply("greeting", 0.9), ["greeting"])
        assert output.intent == "greeting"
        assert output.confidence == 0.9

    def test_intent_not_allowed(self):
        with pytest.raises(ValueError, match="not in allowed list"):
            parse_intent_response(intent_reply("complaint", 0.9), ["greeting", "farewell"])

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="Failed to parse"):
            parse_intent_response("greeting!", ["greeting"])

    def test_confidence_out_of_range(self):
        with pytest.raises(ValueError):
            parse_intent_response(intent_reply("greeting", 1.5), ["greeting"])


class TestIntentLLMRunner:
    """Tests for the intent runner."""

    @pytest.mark.asyncio
    async def test_successful_run(self, fake_llm, intent_task, intent_config):
        client = fake_llm(intent_reply("greeting", 0.95), token_usage=50)

        run = await IntentLLMRunner(client).execute(intent_task, intent_config)

        assert run.succeeded
        assert run.output == {"intent": "greeting", "confidence": 0.95, "reasoning": "Friendly opener"}
        assert run.metrics.tokens == 50
        assert run.metrics.cost is not None
        assert run.provenance.runner_id == "intent.llm"
        assert [e.event for e in run.trace] == [
            "config_validated",
            "input_validated",
            "prompt_built",
            "llm_request_start",
            "llm_response_received",
            "response_parsed",
        ]

        messages = client.calls[0]["messages"]
        assert messages[1].content == "Hello there!"
        assert client.calls[0]["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_disallowed_intent_fails_run(self, fake_llm, intent_task, intent_config):
        client = fake_llm(intent_reply("complaint", 0.9))

        run = await IntentLLMRunner(client).execute(intent_task, intent_config)

        assert not run.succeeded
        assert "not in allowed list" in run.error.message
        assert run.trace[-1].event == "execution_failed"

    @pytest.mark.asyncio
    async def test_missing_intents_config(self, fake_llm, intent_task):
        client = fake_llm(intent_reply("greeting", 0.9))

        run = await IntentLLMRunner(client).execute(intent_task, {})

        assert not run.succeeded
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_collaborator_error(self, fake_llm, intent_task, intent_config):
        client = fake_llm(RuntimeError("backend down"))

        run = await IntentLLMRunner(client).execute(intent_task, intent_config)

        assert not run.succeeded
        assert run.error.message == "backend down"
        assert run.error.stack is not None


class TestIntentMetricsEvaluator:
    """Tests for intent scoring."""

    @pytest.mark.asyncio
    async def test_correct_intent(self, fake_llm, intent_task, intent_config):
        run = await IntentLLMRunner(fake_llm(intent_reply("greeting", 0.95), token_usage=10)).execute(
            intent_task, intent_config
        )

        scores = await IntentMetricsEvaluator().evaluate(run, intent_task)
        by_metric = {s.metric: s for s in scores}

        assert by_metric["accuracy"].value == 1
        assert by_metric["confidence_threshold"].value is True
        assert by_metric["confidence"].value == 0.95
        assert by_metric["confidence"].evidence.snippets == ["Friendly opener"]
        assert by_metric["latency"].target == "global"
        assert by_metric["tokens"].value == 10

    @pytest.mark.asyncio
    async def test_wrong_intent_low_confidence(self, fake_llm, intent_task, intent_config):
        run = await IntentLLMRunner(fake_llm(intent_reply("question", 0.5))).execute(
            intent_task, intent_config
        )

        scores = await IntentMetricsEvaluator().evaluate(run, intent_task)
        by_metric = {s.metric: s for s in scores}

        assert by_metric["accuracy"].value == 0
        assert by_metric["accuracy"].evidence.alignment == {"expected": "greeting", "actual": "question"}
        assert by_metric["confidence_threshold"].value is False

    @pytest.mark.asyncio
    async def test_failed_run(self, fake_llm, intent_task, intent_config):
        run = await IntentLLMRunner(fake_llm("nope")).execute(intent_task, intent_config)

        scores = await IntentMetricsEvaluator().evaluate(run, intent_task)

        assert len(scores) == 1
        assert scores[0].metric == "accuracy"
        assert scores[0].value == 0
        assert scores[0].evidence.explanation.startswith("Execution failed")

    @pytest.mark.asyncio
    async def test_other_capability_skipped(self, fake_llm, intent_task, intent_config, dialogue_task):
        run = await IntentLLMRunner(fake_llm(intent_reply("greeting", 0.9))).execute(
            intent_task, intent_config
        )
        assert await IntentMetricsEvaluator().evaluate(run, dialogue_task) == []
