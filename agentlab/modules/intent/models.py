"""Typed configuration, input and output of the intent capability."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IntentRunnerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    intents: list[str] = Field(..., min_length=1, description="Supported intents")
    examples: dict[str, list[str]] | None = Field(
        default=None, description="Example utterances per intent"
    )
    temperature: float = 0.3
    max_tokens: int = Field(default=100, gt=0)


class IntentInput(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Input must include non-empty text field")
        return value


class IntentOutput(BaseModel):
    intent: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str | None = None


class IntentExpected(BaseModel):
    model_config = ConfigDict(extra="ignore")

    intent: str
    confidence: float | None = Field(default=None, description="Minimum acceptable confidence")
