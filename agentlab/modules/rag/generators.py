"""
Answer generators for the RAG pipeline.

- TemplateGenerator: deterministic, one sentence per chunk citing that chunk
- LLMGenerator: constrained JSON generation with exactly one repair attempt
"""

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from agentlab.config.settings import get_settings
from agentlab.core.errors import GenerationParseError
from agentlab.llm import ChatMessage, CompletionClient, extract_json
from agentlab.utils.logger import get_logger

from .models import Citation, GeneratedAnswer, GeneratedSentence, GenerationResult, RetrievedChunk

logger = get_logger(__name__)

ANSWER_SCHEMA = (
    "{\n"
    '  "answer": "full answer text",\n'
    '  "sentences": [\n'
    '    {"sentence_id": "s1", "text": "...", "citations": [{"chunk_id": "<allowed chunk id>"}]}\n'
    "  ]\n"
    "}"
)


class Generator(ABC):
    type: ClassVar[str]

    @abstractmethod
    async def generate(self, query: str, chunks: list[RetrievedChunk]) -> GenerationResult:
        """Produce a cited answer for ``query`` from ``chunks``."""


class TemplateGenerator(Generator):
    """Concatenates chunk texts; sentence ``s<i>`` cites chunk ``i``."""

    type = "template"

    async def generate(self, query: str, chunks: list[RetrievedChunk]) -> GenerationResult:
        sentences = [
            GeneratedSentence(
                sentence_id=f"s{i + 1}",
                text=chunk.text,
                citations=[Citation(chunk_id=chunk.chunk_id)],
            )
            for i, chunk in enumerate(chunks)
        ]
        return GenerationResult(answer=GeneratedAnswer.from_sentences(sentences, self.type))


class _RawCitation(BaseModel):
    chunk_id: str = Field(..., validation_alias=AliasChoices("chunk_id", "chunkId"))


class _RawSentence(BaseModel):
    sentence_id: str = Field(..., validation_alias=AliasChoices("sentence_id", "sentenceId"))
    text: str
    citations: list[_RawCitation] = Field(default_factory=list)


class _RawAnswer(BaseModel):
    answer: str = Field(..., min_length=1)
    sentences: list[_RawSentence]


def parse_generated_answer(content: str, allowed_chunk_ids: set[str], generator_type: str) -> GeneratedAnswer:
    """
    Parse and validate a generated answer.

    Rules: valid JSON object, non-empty ``answer``, sentence ids ``s1..sn``
    in order, every citation inside ``allowed_chunk_ids``.

    Raises:
        ValueError: Describing the first violation found
    """
    try:
        data = extract_json(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Response is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ValueError("Response must be a JSON object")

    try:
        raw = _RawAnswer.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Response does not match the schema: {e.errors()[0]['msg']}") from e

    sentences = []
    for i, sentence in enumerate(raw.sentences):
        expected_id = f"s{i + 1}"
        if sentence.sentence_id != expected_id:
            raise ValueError(
                f'Sentence ids must be sequential: expected "{expected_id}", '
                f'got "{sentence.sentence_id}"'
            )
        for citation in sentence.citations:
            if citation.chunk_id not in allowed_chunk_ids:
                raise ValueError(
                    f'Sentence {sentence.sentence_id} cites unknown chunk "{citation.chunk_id}"'
                )
        sentences.append(
            GeneratedSentence(
                sentence_id=sentence.sentence_id,
                text=sentence.text,
                citations=[Citation(chunk_id=c.chunk_id) for c in sentence.citations],
            )
        )

    return GeneratedAnswer.from_sentences(sentences, generator_type, answer=raw.answer)


class GenerationState(str, Enum):
    INITIAL = "initial"
    REPAIR = "repair"
    DONE = "done"
    FAILED = "failed"


class LLMGenerator(Generator):
    """
    Grounded answer generation through the text-generation collaborator.

    Two attempts at most: the initial prompt and, if its answer fails to parse
    or validate, one repair prompt restating the error and the schema. A
    second failure raises GenerationParseError.

    Example:
        generator = LLMGenerator(llm_client)
        result = await generator.generate("What is Alpha?", chunks)
        print(result.answer.sources_used, result.attempts)
    """

    type = "llm"

    def __init__(
        self,
        llm_client: CompletionClient,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ):
        settings = get_settings()
        self.llm_client = llm_client
        self.temperature = (
            settings.rag_generator_temperature if temperature is None else temperature
        )
        self.max_tokens = max_tokens or settings.rag_generator_max_tokens

    @staticmethod
    def build_messages(query: str, chunks: list[RetrievedChunk]) -> list[ChatMessage]:
        allowed = "\n".join(f"[{chunk.chunk_id}] {chunk.text}" for chunk in chunks)
        system_prompt = (
            "You answer questions using ONLY the provided chunks.\n"
            "Every sentence must cite the chunk ids that support it.\n"
            "Sentence ids must be sequential: s1, s2, s3, ...\n"
            "Citations may only use the chunk ids listed below.\n\n"
            f"Respond with ONLY a JSON object in this format:\n{ANSWER_SCHEMA}"
        )
        user_prompt = f"Question: {query}\n\nAllowed chunks:\n{allowed}"
        return [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]

    @staticmethod
    def build_repair_messages(
        messages: list[ChatMessage],
        previous: str,
        error: str,
        allowed_chunk_ids: list[str],
    ) -> list[ChatMessage]:
        repair_prompt = (
            f"Your previous response was invalid: {error}\n"
            f"Allowed chunk ids: {', '.join(allowed_chunk_ids)}\n"
            f"Return ONLY a corrected JSON object in this format:\n{ANSWER_SCHEMA}"
        )
        return [
            *messages,
            ChatMessage(role="assistant", content=previous),
            ChatMessage(role="user", content=repair_prompt),
        ]

    async def generate(self, query: str, chunks: list[RetrievedChunk]) -> GenerationResult:
        """
        Raises:
            GenerationParseError: If the repair attempt is invalid as well
        """
        allowed_ids = [chunk.chunk_id for chunk in chunks]
        allowed_set = set(allowed_ids)
        messages = self.build_messages(query, chunks)

        state = GenerationState.INITIAL
        attempts = 0
        token_usage = 0
        answer: GeneratedAnswer | None = None
        last_error = ""
        last_raw = ""

        while state in (GenerationState.INITIAL, GenerationState.REPAIR):
            attempts += 1
            response = await self.llm_client.complete(
                messages, temperature=self.temperature, max_tokens=self.max_tokens
            )
            token_usage += response.token_usage
            last_raw = response.text

            try:
                answer = parse_generated_answer(response.text, allowed_set, self.type)
                state = GenerationState.DONE
            except ValueError as e:
                last_error = str(e)
                if state == GenerationState.INITIAL:
                    logger.warning(f"Generated answer invalid, issuing repair prompt: {last_error}")
                    messages = self.build_repair_messages(
                        messages, response.text, last_error, allowed_ids
                    )
                    state = GenerationState.REPAIR
                else:
                    state = GenerationState.FAILED

        if state == GenerationState.FAILED or answer is None:
            raise GenerationParseError(
                f"Invalid generator output after repair: {last_error}",
                raw=last_raw,
                error=last_error,
            )

        return GenerationResult(answer=answer, token_usage=token_usage, attempts=attempts)


def get_generator(generator_type: str, llm_generator: LLMGenerator | None = None) -> Generator:
    """
    Resolve a generator by type.

    Raises:
        ValueError: For an unknown type, or ``llm`` without a supplied generator
    """
    if generator_type == "template":
        return TemplateGenerator()
    if generator_type == "llm":
        if llm_generator is None:
            raise ValueError("LLM generator requested but no llm generator or client was supplied")
        return llm_generator
    raise ValueError(f"Unknown generator type: {generator_type}")
