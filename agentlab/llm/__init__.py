"""Text-generation collaborator."""

from .client import (
    ChatMessage,
    CompletionClient,
    CompletionResult,
    LangChainCompletionClient,
    estimate_cost,
    get_chat_model,
    get_llm_client,
)
from .json_output import extract_json

__all__ = [
    "ChatMessage",
    "CompletionClient",
    "CompletionResult",
    "LangChainCompletionClient",
    "get_chat_model",
    "get_llm_client",
    "estimate_cost",
    "extract_json",
]
