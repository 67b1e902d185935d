"""Registry of reporting units."""

from agentlab.core.contracts import Reporter

from .base import Registry


class ReporterRegistry(Registry[Reporter]):
    kind = "reporter"

    def get(self, reporter_id: str) -> Reporter | None:
        return self._items.get(reporter_id)

    def find_by_type(self, report_type: str) -> list[Reporter]:
        return [reporter for reporter in self._items.values() if report_type in reporter.types]
