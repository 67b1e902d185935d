"""Typed configuration, input and output of the memory capability."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MemoryOperation = Literal["extract", "retrieve"]


class MemoryItem(BaseModel):
    key: str
    value: Any = None
    importance: float | None = Field(default=None, ge=0.0, le=1.0)


class MemoryRunnerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_memory_size: int | None = Field(
        default=None, gt=0, description="Keep at most this many memories, most important first"
    )
    temperature: float = 0.5
    max_tokens: int = Field(default=200, gt=0)


class MemoryInput(BaseModel):
    operation: MemoryOperation
    message: str
    existing_memories: list[MemoryItem] = Field(default_factory=list)

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Input must include non-empty message field")
        return value


class MemoryOutput(BaseModel):
    operation: MemoryOperation
    memories: list[MemoryItem]


class MemoryExpected(BaseModel):
    model_config = ConfigDict(extra="ignore")

    operation: MemoryOperation
    min_memory_count: int | None = None
    max_memory_count: int | None = None
    required_keys: list[str] | None = None
    min_importance: float | None = None
