"""Scoring unit for memory runs."""

from agentlab.core.contracts import Evaluator
from agentlab.models import AtomicTask, ReportRecord, RunRecord, ScoreRecord

from .models import MemoryExpected, MemoryOutput


def score_accuracy(output: MemoryOutput, expected: MemoryExpected) -> tuple[float, list[str], list[str]]:
    """
    Rubric starting from 1.0; a wrong operation scores 0 outright.

    Deductions: too few memories 0.3, too many 0.2, missing required keys
    0.4, memories below the importance floor 0.2. Clamped to [0, 1].

    Returns:
        (score, issues, successes)
    """
    if output.operation != expected.operation:
        return 0.0, [f"Wrong operation: expected {expected.operation}, got {output.operation}"], []

    count = len(output.memories)
    issues: list[str] = []
    successes: list[str] = []
    score = 1.0

    if expected.min_memory_count is not None:
        if count < expected.min_memory_count:
            score -= 0.3
            issues.append(f"Too few memories: {count} < {expected.min_memory_count}")
        else:
            successes.append(f"Meets minimum memory count: {count} >= {expected.min_memory_count}")

    if expected.max_memory_count is not None:
        if count > expected.max_memory_count:
            score -= 0.2
            issues.append(f"Too many memories: {count} > {expected.max_memory_count}")
        else:
            successes.append(f"Within maximum memory count: {count} <= {expected.max_memory_count}")

    if expected.required_keys:
        keys = [memory.key.lower() for memory in output.memories]
        missing = [
            required
            for required in expected.required_keys
            if not any(required.lower() in key for key in keys)
        ]
        if missing:
            score -= 0.4
            issues.append(f"Missing required keys: {', '.join(missing)}")
        else:
            successes.append(f"Contains all required keys: {', '.join(expected.required_keys)}")

    if expected.min_importance is not None and output.memories:
        low = [m for m in output.memories if (m.importance or 0.0) < expected.min_importance]
        if low:
            score -= 0.2
            issues.append(f"{len(low)} memories below minimum importance {expected.min_importance}")
        else:
            successes.append("All memories meet minimum importance threshold")

    return max(0.0, min(1.0, score)), issues, successes


class MemoryMetricsEvaluator(Evaluator):
    id = "memory.metrics"
    metrics = ["memory_count", "accuracy", "avg_importance", "latency", "tokens", "cost"]
    capability_type = "memory"

    async def evaluate(
        self,
        run: RunRecord,
        task: AtomicTask,
        reports: list[ReportRecord] | None = None,
    ) -> list[ScoreRecord]:
        if not self.applies_to(task):
            return []

        if not run.succeeded:
            message = run.error.message if run.error else "unknown error"
            return [self._score(run, "accuracy", 0, explanation=f"Execution failed: {message}")]

        output = MemoryOutput.model_validate(run.output)
        verb = "Extracted" if output.operation == "extract" else "Retrieved"
        scores = [
            self._score(
                run,
                "memory_count",
                len(output.memories),
                explanation=f"{verb} {len(output.memories)} memories",
            )
        ]

        if task.expected:
            expected = MemoryExpected.model_validate(task.expected)
            score, issues, successes = score_accuracy(output, expected)
            if output.operation != expected.operation:
                explanation = issues[0]
            elif issues:
                explanation = f"Accuracy score: {score:.2f}. Issues: {'; '.join(issues)}"
            else:
                explanation = f"Accuracy score: {score:.2f}. {'; '.join(successes)}"
            scores.append(
                self._score(
                    run,
                    "accuracy",
                    score,
                    explanation=explanation,
                    snippets=issues or successes,
                )
            )

        if output.memories:
            avg_importance = sum(m.importance or 0.0 for m in output.memories) / len(output.memories)
            scores.append(
                self._score(
                    run,
                    "avg_importance",
                    avg_importance,
                    explanation=f"Average importance: {avg_importance:.2f}",
                )
            )

        scores.extend(self._usage_scores(run))
        return scores
