"""Registry of scoring units."""

from agentlab.core.contracts import Evaluator

from .base import Registry


class EvaluatorRegistry(Registry[Evaluator]):
    """Scoring units keyed by id. Unknown ids raise with the known ids listed."""

    kind = "evaluator"

    def get(self, evaluator_id: str) -> Evaluator:
        return self._require(evaluator_id)

    def find_by_metric(self, metric: str) -> list[Evaluator]:
        return [evaluator for evaluator in self._items.values() if metric in evaluator.metrics]
