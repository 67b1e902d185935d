"""Intent recognition capability."""

from .evaluator import IntentMetricsEvaluator
from .models import IntentExpected, IntentInput, IntentOutput, IntentRunnerConfig
from .runner import IntentLLMRunner, build_system_prompt, parse_intent_response

__all__ = [
    "IntentLLMRunner",
    "IntentMetricsEvaluator",
    "IntentRunnerConfig",
    "IntentInput",
    "IntentOutput",
    "IntentExpected",
    "build_system_prompt",
    "parse_intent_response",
]
