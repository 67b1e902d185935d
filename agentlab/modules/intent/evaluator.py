"""Scoring unit for intent runs."""

from agentlab.core.contracts import Evaluator
from agentlab.models import AtomicTask, ReportRecord, RunRecord, ScoreRecord

from .models import IntentExpected, IntentOutput


class IntentMetricsEvaluator(Evaluator):
    """Accuracy against ``expected.intent`` plus confidence and usage metrics."""

    id = "intent.metrics"
    metrics = ["accuracy", "confidence_threshold", "confidence", "latency", "tokens", "cost"]
    capability_type = "intent"

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

        output = IntentOutput.model_validate(run.output)
        scores: list[ScoreRecord] = []

        if task.expected:
            expected = IntentExpected.model_validate(task.expected)
            is_correct = output.intent == expected.intent
            scores.append(
                self._score(
                    run,
                    "accuracy",
                    1 if is_correct else 0,
                    explanation=(
                        f'Intent correctly identified as "{output.intent}"'
                        if is_correct
                        else f'Expected "{expected.intent}" but got "{output.intent}"'
                    ),
                    alignment={"expected": expected.intent, "actual": output.intent},
                )
            )

            if expected.confidence is not None:
                meets = output.confidence >= expected.confidence
                relation = "meets" if meets else "below"
                scores.append(
                    self._score(
                        run,
                        "confidence_threshold",
                        meets,
                        explanation=(
                            f"Confidence {output.confidence:.2f} {relation} threshold "
                            f"{expected.confidence}"
                        ),
                        alignment={"threshold": expected.confidence, "actual": output.confidence},
                    )
                )

        scores.append(
            self._score(
                run,
                "confidence",
                output.confidence,
                explanation=f"Model confidence: {output.confidence:.2f}",
                snippets=[output.reasoning] if output.reasoning else None,
            )
        )
        scores.extend(self._usage_scores(run))
        return scores
