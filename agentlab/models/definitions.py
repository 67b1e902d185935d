"""Static capability definitions (metadata only, no runtime behaviour)."""

from pydantic import BaseModel, ConfigDict, Field


class TaskDefinition(BaseModel):
    """What a capability type claims to do."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    success_criteria: list[str] = Field(default_factory=list)
    error_taxonomy: list[str] = Field(default_factory=list)


class WorkflowStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_id: str
    name: str


class WorkflowDefinition(BaseModel):
    """Named sequence of pipeline steps."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    steps: list[WorkflowStep] = Field(default_factory=list)


class MethodDefinition(BaseModel):
    """Named implementation strategy, pointing at an execution unit id."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    strategy: str
    implementation: str = Field(..., description="Execution unit id")
