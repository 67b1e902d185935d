"""Text-generation collaborator and its LangChain-backed implementation."""

import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from agentlab.config.settings import get_settings
from agentlab.utils.logger import get_logger

logger = get_logger(__name__)


class ChatMessage(BaseModel):
    """One role/content pair of a prompt."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionResult(BaseModel):
    """Text returned by the collaborator plus usage facts."""

    text: str
    token_usage: int = Field(default=0, ge=0, description="Total tokens (prompt + completion)")
    latency: float = Field(default=0.0, ge=0.0, description="Call latency in milliseconds")


class CompletionClient(ABC):
    """
    Opaque text-generation backend.

    The harness never assumes a specific provider; execution units only see
    ``complete(messages, temperature, max_tokens)``.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResult:
        """Generate a completion for ``messages``."""


@lru_cache(maxsize=8)
def get_chat_model(
    provider: Literal["anthropic", "openai"] | None = None,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
):
    """
    Get a LangChain chat model with caching.

    Args:
        provider: LLM provider ("anthropic" or "openai"). Uses settings default if None.
        model: Model name. Uses settings default if None.
        temperature: Temperature for generation. Uses settings default if None.
        max_tokens: Max tokens to generate. Uses settings default if None.

    Returns:
        LangChain ChatModel instance (ChatAnthropic or ChatOpenAI)
    """
    settings = get_settings()
    provider = provider or settings.llm_provider
    model = model or settings.llm_model
    temperature = temperature if temperature is not None else settings.llm_temperature
    max_tokens = max_tokens or settings.llm_max_tokens

    logger.info(f"Initializing LLM client: {provider}/{model}")

    if provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set in environment")

        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError as exc:
            raise ImportError(
                "langchain-anthropic is required for Anthropic models. "
                "Install with: pip install agentlab[anthropic]"
            ) from exc

        return ChatAnthropic(
            api_key=settings.anthropic_api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    elif provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not set in environment")

        try:
            from langchain_openai import ChatOpenAI
        except ImportError as exc:
            raise ImportError(
                "langchain-openai is required for OpenAI models. "
                "Install with: pip install agentlab[openai]"
            ) from exc

        return ChatOpenAI(
            api_key=settings.openai_api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


def to_langchain_messages(messages: list[ChatMessage]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
        elif message.role == "assistant":
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


def _token_usage(response) -> int:
    usage_metadata = getattr(response, "usage_metadata", None)
    if usage_metadata:
        return int(usage_metadata.get("total_tokens", 0))

    metadata = getattr(response, "response_metadata", None) or {}
    usage = metadata.get("token_usage") or metadata.get("usage") or {}
    if "total_tokens" in usage:
        return int(usage["total_tokens"])
    return int(usage.get("input_tokens", 0)) + int(usage.get("output_tokens", 0))


class LangChainCompletionClient(CompletionClient):
    """
    CompletionClient backed by a LangChain chat model.

    Example:
        client = LangChainCompletionClient(provider="anthropic")
        result = await client.complete([ChatMessage(role="user", content="Hi")])
    """

    def __init__(
        self,
        provider: Literal["anthropic", "openai"] | None = None,
        model: str | None = None,
    ):
        settings = get_settings()
        self.provider = provider or settings.llm_provider
        self.model = model or settings.llm_model

    async def complete(
        self,
        messages: list[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResult:
        llm = get_chat_model(self.provider, self.model, temperature, max_tokens)
        input_length = sum(len(message.content) for message in messages)

        start_time = time.perf_counter()
        try:
            response = await llm.ainvoke(to_langchain_messages(messages))
        except Exception as e:
            logger.log_error_with_context(
                "LLM call failed",
                e,
                llm_provider=self.provider,
                llm_model=self.model,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                input_length=input_length,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        text = response.content if isinstance(response.content, str) else str(response.content)
        tokens_used = _token_usage(response)

        logger.log_llm_call(
            model=self.model,
            provider=self.provider,
            duration_ms=duration_ms,
            tokens_used=tokens_used,
            input_length=input_length,
            output_length=len(text),
        )

        return CompletionResult(text=text, token_usage=tokens_used, latency=duration_ms)


def get_llm_client(
    provider: Literal["anthropic", "openai"] | None = None,
    model: str | None = None,
) -> CompletionClient:
    """Default text-generation collaborator built from settings."""
    return LangChainCompletionClient(provider=provider, model=model)


def estimate_cost(tokens: int | None) -> float | None:
    """Flat-rate cost estimate in USD, None when no tokens were reported."""
    if not tokens:
        return None
    return tokens / 1000 * get_settings().cost_per_1k_tokens
