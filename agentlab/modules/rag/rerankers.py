"""Rerankers: reorder a retrieved candidate set and recompute ranks."""

import json
from abc import ABC, abstractmethod
from typing import ClassVar

from agentlab.core.errors import GenerationParseError
from agentlab.llm import ChatMessage, CompletionClient, extract_json
from agentlab.utils.logger import get_logger

from .models import RetrievedChunk

logger = get_logger(__name__)


def rerank_in_order(chunks: list[RetrievedChunk]) -> list[RetrievedChunk]:
    """Assign 1-based ranks following list order."""
    return [chunk.model_copy(update={"rank": i + 1}) for i, chunk in enumerate(chunks)]


class Reranker(ABC):
    type: ClassVar[str]

    @abstractmethod
    async def rerank(self, chunks: list[RetrievedChunk], query: str) -> list[RetrievedChunk]:
        """Return ``chunks`` reordered, with ranks recomputed."""


class SimpleReranker(Reranker):
    """Longer chunk text first, then higher retrieval score."""

    type = "simple"

    async def rerank(self, chunks: list[RetrievedChunk], query: str) -> list[RetrievedChunk]:
        ordered = sorted(chunks, key=lambda chunk: (-len(chunk.text), -chunk.score))
        return rerank_in_order(ordered)


class LLMReranker(Reranker):
    """
    Asks the text-generation collaborator for one relevance score per chunk.

    The collaborator must return ``{"scores": [number, ...]}`` in chunk order.
    Non-numeric entries count as 0.
    """

    type = "llm"

    def __init__(self, llm_client: CompletionClient, temperature: float = 0.0, max_tokens: int = 256):
        self.llm_client = llm_client
        self.temperature = temperature
        self.max_tokens = max_tokens

    @staticmethod
    def build_prompt(chunks: list[RetrievedChunk], query: str) -> str:
        lines = "\n".join(f"{i}: {chunk.text}" for i, chunk in enumerate(chunks))
        return (
            "You are a reranker. Given a query and chunks, output JSON with a scores "
            "array in the same order as the chunks.\n"
            f"Query: {query}\n"
            f"Chunks:\n{lines}\n"
            'Return ONLY JSON: {"scores": [number, ...]}'
        )

    @staticmethod
    def parse_scores(content: str, expected: int) -> list[float]:
        """
        Raises:
            GenerationParseError: If the content is not JSON, has no scores
                array or the array length differs from ``expected``
        """
        try:
            data = extract_json(content)
        except json.JSONDecodeError as e:
            raise GenerationParseError(
                f"Failed to parse LLM rerank response as JSON: {content}", raw=content
            ) from e

        scores = data.get("scores") if isinstance(data, dict) else None
        if not isinstance(scores, list):
            raise GenerationParseError("Rerank response is missing a scores array", raw=content)
        if len(scores) != expected:
            raise GenerationParseError(
                f"Rerank scores length mismatch: expected {expected}, got {len(scores)}",
                raw=content,
            )

        return [
            float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0.0
            for value in scores
        ]

    async def rerank(self, chunks: list[RetrievedChunk], query: str) -> list[RetrievedChunk]:
        if not chunks:
            return []

        response = await self.llm_client.complete(
            [ChatMessage(role="system", content=self.build_prompt(chunks, query))],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        scores = self.parse_scores(response.text, len(chunks))

        rescored = [chunk.model_copy(update={"score": score}) for chunk, score in zip(chunks, scores)]
        rescored.sort(key=lambda chunk: chunk.score, reverse=True)

        logger.debug(f"LLM reranked {len(chunks)} chunks", extra={"tokens": response.token_usage})
        return rerank_in_order(rescored)
