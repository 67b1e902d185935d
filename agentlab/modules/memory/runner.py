"""Memory extraction and retrieval runner."""

import json
import time
from typing import Any
from uuid import uuid4

from agentlab.core.contracts import Runner, TraceRecorder
from agentlab.llm import ChatMessage, CompletionClient, estimate_cost, extract_json
from agentlab.models import AtomicTask, RunRecord
from agentlab.models.artifact import utc_now
from agentlab.utils.logger import get_logger

from .models import MemoryInput, MemoryItem, MemoryOutput, MemoryRunnerConfig

logger = get_logger(__name__)

EXTRACTION_PROMPT = """You are a memory extraction system. Your task is to identify and extract important, factual information from user messages that should be remembered for future reference.

Extract information such as:
- Personal details (name, age, occupation, etc.)
- Preferences and interests
- Important facts or data
- Relationships and connections

Ignore:
- Temporary states (current mood, weather)
- Casual conversation filler
- Questions without answers

Respond with a JSON object in the following format:
{
  "memories": [
    {
      "key": "descriptive_key_name",
      "value": "the actual value or information",
      "importance": 0.0 to 1.0 (how important this information is)
    }
  ]
}

If no important information is found, return {"memories": []}.

IMPORTANT: Your response must be ONLY the JSON object, no additional text."""


def parse_extraction_response(content: str) -> list[MemoryItem]:
    try:
        data = extract_json(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse LLM response as JSON: {content}") from e

    if not isinstance(data, dict) or not isinstance(data.get("memories"), list):
        raise ValueError("Response must include memories array")
    return [MemoryItem.model_validate(item) for item in data["memories"]]


def retrieve_memories(query: str, memories: list[MemoryItem]) -> list[MemoryItem]:
    """
    Keyword match between ``query`` and each memory's key or value.

    A memory matches when either side contains the other (case-insensitive).
    Matches are returned most important first.
    """
    query_lower = query.lower()

    def matches(memory: MemoryItem) -> bool:
        key = memory.key.lower()
        value = str(memory.value).lower()
        return key in query_lower or value in query_lower or query_lower in key or query_lower in value

    relevant = [memory for memory in memories if matches(memory)]
    return sorted(relevant, key=lambda memory: memory.importance or 0.0, reverse=True)


def limit_memories(memories: list[MemoryItem], max_size: int | None) -> list[MemoryItem]:
    if max_size is None or len(memories) <= max_size:
        return memories
    ranked = sorted(memories, key=lambda memory: memory.importance or 0.0, reverse=True)
    return ranked[:max_size]


class MemoryLLMRunner(Runner):
    """
    Two operations:

    - extract: asks the collaborator for memorable facts in ``input.message``
    - retrieve: keyword search over ``input.existing_memories`` (no LLM call)
    """

    id = "memory.llm"
    type = "memory"
    version = "1.0.0"

    def __init__(self, llm_client: CompletionClient):
        self.llm_client = llm_client

    async def execute(self, task: AtomicTask, config: Any) -> RunRecord:
        run_id = str(uuid4())
        started_at = utc_now()
        trace = TraceRecorder()

        try:
            runner_config = MemoryRunnerConfig.model_validate(config or {})
            trace.add("config_validated", {"max_memory_size": runner_config.max_memory_size})

            memory_input = MemoryInput.model_validate(task.input or {})
            trace.add(
                "input_validated",
                {
                    "operation": memory_input.operation,
                    "message_length": len(memory_input.message),
                },
            )

            tokens = 0
            if memory_input.operation == "extract":
                memories, tokens = await self._extract(memory_input, runner_config, trace)
            else:
                memories = self._retrieve(memory_input, trace)

            memories = limit_memories(memories, runner_config.max_memory_size)
            output = MemoryOutput(operation=memory_input.operation, memories=memories)

            return self._completed_record(
                run_id,
                task,
                started_at,
                trace,
                output=output.model_dump(),
                config=runner_config.model_dump(),
                tokens=tokens or None,
                cost=estimate_cost(tokens),
            )

        except Exception as e:
            logger.warning(f"Memory run failed for task {task.id}: {e}", extra={"task_id": task.id})
            return self._failed_record(run_id, task, started_at, trace, e, config)

    async def _extract(
        self,
        memory_input: MemoryInput,
        config: MemoryRunnerConfig,
        trace: TraceRecorder,
    ) -> tuple[list[MemoryItem], int]:
        trace.add("extraction_prompt_built", {"prompt_length": len(EXTRACTION_PROMPT)}, level="debug")
        trace.add(
            "llm_request_start",
            {"temperature": config.temperature, "max_tokens": config.max_tokens},
        )

        llm_start = time.perf_counter()
        response = await self.llm_client.complete(
            [
                ChatMessage(role="system", content=EXTRACTION_PROMPT),
                ChatMessage(role="user", content=memory_input.message),
            ],
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
        trace.add(
            "llm_response_received",
            {
                "latency": (time.perf_counter() - llm_start) * 1000,
                "content_length": len(response.text),
            },
        )

        memories = parse_extraction_response(response.text)
        trace.add("memories_extracted", {"memory_count": len(memories)})
        return memories, response.token_usage

    def _retrieve(self, memory_input: MemoryInput, trace: TraceRecorder) -> list[MemoryItem]:
        trace.add(
            "retrieval_start",
            {
                "total_memories": len(memory_input.existing_memories),
                "query": memory_input.message,
            },
        )
        memories = retrieve_memories(memory_input.message, memory_input.existing_memories)
        trace.add("retrieval_complete", {"retrieved_count": len(memories)})
        return memories
