"""Typed configuration, input and output of the dialogue capability."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DialogueMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class DialogueRunnerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_history_length: int = Field(default=10, gt=0)
    temperature: float = 0.7
    max_tokens: int = Field(default=150, gt=0)
    system_prompt: str | None = Field(
        default=None, description="Prepended as a system message, never truncated"
    )


class DialogueInput(BaseModel):
    message: str
    history: list[DialogueMessage] = Field(default_factory=list)

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Input must include non-empty message field")
        return value


class DialogueOutput(BaseModel):
    response: str
    history: list[DialogueMessage]


class DialogueExpected(BaseModel):
    model_config = ConfigDict(extra="ignore")

    response_contains: list[str] | None = None
    response_not_contains: list[str] | None = None
    min_response_length: int | None = None
    max_response_length: int | None = None
