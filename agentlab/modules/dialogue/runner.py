"""LLM-backed dialogue runner."""

import time
from typing import Any
from uuid import uuid4

from agentlab.core.contracts import Runner, TraceRecorder
from agentlab.llm import ChatMessage, CompletionClient, estimate_cost
from agentlab.models import AtomicTask, RunRecord
from agentlab.models.artifact import utc_now
from agentlab.utils.logger import get_logger

from .models import DialogueInput, DialogueMessage, DialogueOutput, DialogueRunnerConfig

logger = get_logger(__name__)


def truncate_history(history: list[DialogueMessage], max_length: int) -> list[DialogueMessage]:
    """Keep the most recent ``max_length`` messages."""
    if len(history) <= max_length:
        return history
    return history[-max_length:]


class DialogueLLMRunner(Runner):
    """Answers ``input.message`` given the (truncated) conversation history."""

    id = "dialogue.llm"
    type = "dialogue"
    version = "1.0.0"

    def __init__(self, llm_client: CompletionClient):
        self.llm_client = llm_client

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        run_id = str(uuid4())
        started_at = utc_now()
        trace = TraceRecorder()

        try:
            runner_config = DialogueRunnerConfig.model_validate(config or {})
            trace.add("config_validated", {"max_history_length": runner_config.max_history_length})

            dialogue_input = DialogueInput.model_validate(task.input or {})
            trace.add(
                "input_validated",
                {
                    "message_length": len(dialogue_input.message),
                    "history_length": len(dialogue_input.history),
                },
            )

            updated = [
                *dialogue_input.history,
                DialogueMessage(role="user", content=dialogue_input.message),
            ]
            truncated = truncate_history(updated, runner_config.max_history_length)
            trace.add(
                "history_truncated",
                {"original_length": len(updated), "truncated_length": len(truncated)},
                level="debug",
            )

            messages = [ChatMessage(role=m.role, content=m.content) for m in truncated]
            if runner_config.system_prompt:
                messages.insert(0, ChatMessage(role="system", content=runner_config.system_prompt))

            trace.add(
                "llm_request_start",
                {
                    "message_count": len(messages),
                    "temperature": runner_config.temperature,
                    "max_tokens": runner_config.max_tokens,
                },
            )
            llm_start = time.perf_counter()
            response = await self.llm_client.complete(
                messages,
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

            final_history = [*truncated, DialogueMessage(role="assistant", content=response.text)]
            trace.add(
                "response_generated",
                {
                    "response_length": len(response.text),
                    "final_history_length": len(final_history),
                },
            )

            output = DialogueOutput(response=response.text, history=final_history)
            return self._completed_record(
                run_id,
                task,
                started_at,
                trace,
                output=output.model_dump(),
                config=runner_config.model_dump(),
                tokens=response.token_usage or None,
                cost=estimate_cost(response.token_usage),
            )

        except Exception as e:
            logger.warning(f"Dialogue run failed for task {task.id}: {e}", extra={"task_id": task.id})
            return self._failed_record(run_id, task, started_at, trace, e, config)
