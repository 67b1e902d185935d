"""Scoring unit for dialogue runs."""

from agentlab.core.contracts import Evaluator
from agentlab.models import AtomicTask, ReportRecord, RunRecord, ScoreRecord

from .models import DialogueExpected, DialogueOutput


def score_relevance(output: DialogueOutput, expected: DialogueExpected) -> tuple[float, list[str], list[str]]:
    """
    Keyword/length rubric starting from 1.0.

    Deductions: missing required keywords 0.5, forbidden keywords 0.3, too
    short 0.2, too long 0.2. The result is clamped to [0, 1].

    Returns:
        (score, issues, successes)
    """
    response = output.response.lower()
    length = len(output.response)
    issues: list[str] = []
    successes: list[str] = []
    score = 1.0

    if expected.response_contains:
        missing = [kw for kw in expected.response_contains if kw.lower() not in response]
        if missing:
            score -= 0.5
            issues.append(f"Missing keywords: {', '.join(missing)}")
        else:
            successes.append(
                f"Contains all required keywords: {', '.join(expected.response_contains)}"
            )

    if expected.response_not_contains:
        found = [kw for kw in expected.response_not_contains if kw.lower() in response]
        if found:
            score -= 0.3
            issues.append(f"Contains forbidden keywords: {', '.join(found)}")
        else:
            successes.append("Does not contain forbidden keywords")

    if expected.min_response_length is not None:
        if length < expected.min_response_length:
            score -= 0.2
            issues.append(f"Response too short: {length} < {expected.min_response_length}")
        else:
            successes.append(
                f"Response meets minimum length: {length} >= {expected.min_response_length}"
            )

    if expected.max_response_length is not None:
        if length > expected.max_response_length:
            score -= 0.2
            issues.append(f"Response too long: {length} > {expected.max_response_length}")
        else:
            successes.append(
                f"Response within maximum length: {length} <= {expected.max_response_length}"
            )

    return max(0.0, min(1.0, score)), issues, successes


class DialogueMetricsEvaluator(Evaluator):
    id = "dialogue.metrics"
    metrics = ["relevance", "response_length", "history_length", "latency", "tokens", "cost"]
    capability_type = "dialogue"

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
            return [self._score(run, "relevance", 0, explanation=f"Execution failed: {message}")]

        output = DialogueOutput.model_validate(run.output)
        scores: list[ScoreRecord] = []

        if task.expected:
            expected = DialogueExpected.model_validate(task.expected)
            score, issues, successes = score_relevance(output, expected)
            detail = f"Issues: {'; '.join(issues)}" if issues else "; ".join(successes)
            scores.append(
                self._score(
                    run,
                    "relevance",
                    score,
                    explanation=f"Relevance score: {score:.2f}. {detail}",
                    snippets=issues or successes,
                )
            )

        scores.append(
            self._score(
                run,
                "response_length",
                len(output.response),
                explanation=f"Response length: {len(output.response)} characters",
            )
        )
        scores.append(
            self._score(
                run,
                "history_length",
                len(output.history),
                target="global",
                explanation=f"Dialogue history contains {len(output.history)} messages",
            )
        )
        scores.extend(self._usage_scores(run))
        return scores
