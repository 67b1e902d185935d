"""
agentlab: evaluation harness for text-producing capability modules.

Runs units of work through pluggable runners, records full traces, scores
results with pluggable evaluators and stamps every run with a reproducible
configuration fingerprint.
"""

from agentlab.runtime import EvalRuntime, create_eval_runtime

__version__ = "0.1.0"

__all__ = ["EvalRuntime", "create_eval_runtime", "__version__"]
