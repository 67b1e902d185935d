"""Registries for static definitions and artifact schemas."""

from agentlab.models import (
    ArtifactSchema,
    MethodDefinition,
    TaskDefinition,
    WorkflowDefinition,
)

from .base import Registry


class TaskDefinitionRegistry(Registry[TaskDefinition]):
    kind = "task definition"

    def get(self, definition_id: str) -> TaskDefinition:
        return self._require(definition_id)


class WorkflowDefinitionRegistry(Registry[WorkflowDefinition]):
    kind = "workflow definition"

    def get(self, definition_id: str) -> WorkflowDefinition:
        return self._require(definition_id)


class MethodDefinitionRegistry(Registry[MethodDefinition]):
    kind = "method definition"

    def get(self, definition_id: str) -> MethodDefinition:
        return self._require(definition_id)

    def find_by_implementation(self, runner_id: str) -> list[MethodDefinition]:
        return [method for method in self._items.values() if method.implementation == runner_id]


class ArtifactSchemaRegistry(Registry[ArtifactSchema]):
    """Known artifact schema ids. Consumers skip ids that are not registered."""

    kind = "artifact schema"

    def get(self, schema_id: str) -> ArtifactSchema:
        return self._require(schema_id)

    def register_many(self, schemas: list[ArtifactSchema]) -> None:
        for schema in schemas:
            self.register(schema)
