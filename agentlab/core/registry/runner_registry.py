"""Registry of execution units."""

from agentlab.core.contracts import Runner

from .base import Registry


class RunnerRegistry(Registry[Runner]):
    """Execution units keyed by id, indexed by capability type."""

    kind = "runner"

    def get(self, runner_id: str) -> Runner | None:
        """Return the runner, or None when the id is unknown."""
        return self._items.get(runner_id)

    def list_by_type(self, capability_type: str) -> list[Runner]:
        return [runner for runner in self._items.values() if runner.type == capability_type]

    def types(self) -> list[str]:
        return sorted({runner.type for runner in self._items.values()})
