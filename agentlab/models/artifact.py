"""Artifact and report data models."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArtifactSchema(BaseModel):
    """Registered description of an artifact schema id."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Namespaced schema id (e.g., 'rag.retrieved')")
    name: str
    version: str = "1.0.0"
    description: str | None = None


class ArtifactMetadata(BaseModel):
    """Optional alignment metadata attached to an artifact."""

    source_id: str | None = None
    span: str | None = None
    score: float | None = None
    provenance: str | None = None
    alignment_id: str | None = None


class ArtifactRecord(BaseModel):
    """Typed intermediate payload produced by one pipeline step."""

    model_config = ConfigDict(frozen=True)

    schema_id: str = Field(..., min_length=1, description="Artifact schema id")
    produced_by_step_id: str = Field(..., min_length=1, description="Pipeline step that produced it")
    payload: dict[str, Any] = Field(default_factory=dict)
    metadata: ArtifactMetadata | None = None


class ReportRecord(BaseModel):
    """Derived analysis of a run, produced by a reporting unit."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    run_id: str
    type: str = Field(..., description="Report type tag (e.g., 'rag.evidence')")
    payload: dict[str, Any] = Field(default_factory=dict)
    produced_at: datetime = Field(default_factory=utc_now)
