"""LLM-backed intent recognition runner."""

import json
import time
from typing import Any
from uuid import uuid4

from agentlab.core.contracts import Runner, TraceRecorder
from agentlab.llm import ChatMessage, CompletionClient, estimate_cost, extract_json
from agentlab.models import AtomicTask, RunRecord
from agentlab.models.artifact import utc_now
from agentlab.utils.logger import get_logger

from .models import IntentInput, IntentOutput, IntentRunnerConfig

logger = get_logger(__name__)


def build_system_prompt(config: IntentRunnerConfig) -> str:
    intents = "\n".join(f"- {intent}" for intent in config.intents)
    prompt = (
        "You are an intent recognition system. Your task is to identify the user's "
        "intent from their input.\n\n"
        f"Available intents:\n{intents}\n"
    )

    if config.examples:
        prompt += "\nExamples for each intent:\n"
        for intent, examples in config.examples.items():
            prompt += f"- {intent}: {', '.join(examples)}\n"

    prompt += (
        "\nYou must respond with a JSON object in the following format:\n"
        "{\n"
        '  "intent": "one of the available intents",\n'
        '  "confidence": 0.0 to 1.0,\n'
        '  "reasoning": "brief explanation of why you chose this intent"\n'
        "}\n\n"
        "IMPORTANT: Your response must be ONLY the JSON object, no additional text."
    )
    return prompt


def parse_intent_response(content: str, allowed_intents: list[str]) -> IntentOutput:
    """
    Parse and validate the collaborator's answer.

    Raises:
        ValueError: If the answer is not JSON, misses fields or names an
            intent outside ``allowed_intents``
    """
    try:
        data = extract_json(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse LLM response as JSON: {content}") from e

    if not isinstance(data, dict):
        raise ValueError("Response must be a JSON object")

    output = IntentOutput.model_validate(data)
    if output.intent not in allowed_intents:
        raise ValueError(
            f'Intent "{output.intent}" not in allowed list: {", ".join(allowed_intents)}'
        )
    return output


class IntentLLMRunner(Runner):
    """Classifies ``input.text`` into one of the configured intents."""

    id = "intent.llm"
    type = "intent"
    version = "1.0.0"

    def __init__(self, llm_client: CompletionClient):
        self.llm_client = llm_client

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        run_id = str(uuid4())
        started_at = utc_now()
        trace = TraceRecorder()

        try:
            runner_config = IntentRunnerConfig.model_validate(config or {})
            trace.add("config_validated", {"intents": runner_config.intents})

            intent_input = IntentInput.model_validate(task.input or {})
            trace.add("input_validated", {"text_length": len(intent_input.text)})

            system_prompt = build_system_prompt(runner_config)
            trace.add("prompt_built", {"prompt_length": len(system_prompt)}, level="debug")

            trace.add(
                "llm_request_start",
                {
                    "temperature": runner_config.temperature,
                    "max_tokens": runner_config.max_tokens,
                },
            )
            llm_start = time.perf_counter()
            response = await self.llm_client.complete(
                [
                    ChatMessage(role="system", content=system_prompt),
                    ChatMessage(role="user", content=intent_input.text),
                ],
                temperature=runner_config.temperature,
                max_tokens=runner_config.max_tokens,
            )
            trace.add(
                "llm_response_received",
                {
                    "latency": (time.perf_counter() - llm_start) * 1000,
                    "content_length": len(response.text),
                },
            )

            output = parse_intent_response(response.text, runner_config.intents)
            trace.add("response_parsed", {"intent": output.intent, "confidence": output.confidence})

            return self._completed_record(
                run_id,
                task,
                started_at,
                trace,
                output=output.model_dump(exclude_none=True),
                config=runner_config.model_dump(),
                tokens=response.token_usage or None,
                cost=estimate_cost(response.token_usage),
            )

        except Exception as e:
            logger.warning(f"Intent run failed for task {task.id}: {e}", extra={"task_id": task.id})
            return self._failed_record(run_id, task, started_at, trace, e, config)
