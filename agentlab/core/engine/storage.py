"""
Storage collaborator for run and score records.

Only an in-memory implementation ships with the harness; durable backends
implement the same abstract interface.
"""

from abc import ABC, abstractmethod

from agentlab.core.errors import RunNotFoundError
from agentlab.models import RunRecord, RunStatus, ScoreRecord
from agentlab.utils.logger import get_logger

logger = get_logger(__name__)


class Storage(ABC):
    """Persists RunRecords and ScoreRecords."""

    @abstractmethod
    async def save_run(self, run: RunRecord) -> None:
        """Save a run record, replacing any record with the same id."""

    @abstractmethod
    async def get_run(self, run_id: str) -> RunRecord | None:
        """Return the run record, or None when unknown."""

    @abstractmethod
    async def list_runs(
        self,
        task_id: str | None = None,
        task_type: str | None = None,
        status: RunStatus | str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[RunRecord]:
        """List run records newest-first, optionally filtered and paginated."""

    @abstractmethod
    async def save_scores(self, scores: list[ScoreRecord]) -> None:
        """Append score records."""

    @abstractmethod
    async def get_scores(self, run_id: str) -> list[ScoreRecord]:
        """Return every score recorded for a run."""

    @abstractmethod
    async def delete_run(self, run_id: str) -> None:
        """
        Delete a run and its scores.

        Raises:
            RunNotFoundError: If the run does not exist
        """


class InMemoryStorage(Storage):
    """Dictionary-backed storage for development and tests."""

    def __init__(self) -> None:
        self._runs: dict[str, RunRecord] = {}
        self._scores: dict[str, list[ScoreRecord]] = {}

    async def save_run(self, run: RunRecord) -> None:
        self._runs[run.id] = run
        logger.debug(f"Saved run {run.id}", extra={"run_id": run.id, "status": run.status.value})

    async def get_run(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    async def list_runs(
        self,
        task_id: str | None = None,
        task_type: str | None = None,
        status: RunStatus | str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[RunRecord]:
        runs = list(self._runs.values())

        if task_id:
            runs = [run for run in runs if run.task_id == task_id]
        if task_type:
            runs = [run for run in runs if run.task_type == task_type]
        if status:
            status = RunStatus(status)
            runs = [run for run in runs if run.status == status]

        # Newest first
        runs.sort(key=lambda run: run.started_at, reverse=True)

        end = None if limit is None else offset + limit
        return runs[offset:end]

    async def save_scores(self, scores: list[ScoreRecord]) -> None:
        for score in scores:
            self._scores.setdefault(score.run_id, []).append(score)

    async def get_scores(self, run_id: str) -> list[ScoreRecord]:
        return list(self._scores.get(run_id, []))

    async def delete_run(self, run_id: str) -> None:
        if run_id not in self._runs:
            raise RunNotFoundError(run_id)
        del self._runs[run_id]
        self._scores.pop(run_id, None)
        logger.info(f"Deleted run {run_id}", extra={"run_id": run_id})

    def clear(self) -> None:
        """Drop all data."""
        self._runs.clear()
        self._scores.clear()

    def get_stats(self) -> dict[str, int]:
        return {
            "runs": len(self._runs),
            "scores": sum(len(scores) for scores in self._scores.values()),
        }
