"""Structured logging with run/task context support."""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from ..config import get_settings

# Context variables for run tracking
run_id_context: ContextVar[str | None] = ContextVar("run_id", default=None)
task_id_context: ContextVar[str | None] = ContextVar("task_id", default=None)


def _current_context() -> dict[str, str]:
    context = {}
    run_id = run_id_context.get()
    if run_id:
        context["run_id"] = run_id
    task_id = task_id_context.get()
    if task_id:
        context["task_id"] = task_id
    return context


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        log_data.update(_current_context())

        # Add extra fields from record
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        if record.stack_info:
            log_data["stack_info"] = record.stack_info

        return json.dumps(log_data, default=str)


class ProductionLogger(logging.LoggerAdapter):
    """
    Logger adapter used across the harness:
    - Structured logging
    - Context tracking (run_id, task_id)
    - Performance logging
    - Error enrichment
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        """Add contextual information to log messages."""
        extra = dict(self.extra)
        extra.update(kwargs.get("extra", {}))

        for key, value in _current_context().items():
            extra.setdefault(key, value)

        kwargs["extra"] = {"extra_fields": extra}
        return msg, kwargs

    def log_performance(
        self,
        operation: str,
        duration_ms: float,
        **metadata: Any
    ) -> None:
        """
        Log performance metrics.

        Args:
            operation: Name of the operation
            duration_ms: Duration in milliseconds
            **metadata: Additional metadata
        """
        self.info(
            f"Performance: {operation} completed in {duration_ms:.2f}ms",
            extra={
                "operation": operation,
                "duration_ms": duration_ms,
                "metric_type": "performance",
                **metadata,
            },
        )

    def log_error_with_context(
        self,
        message: str,
        error: BaseException,
        **context: Any
    ) -> None:
        """
        Log errors with full context and stack trace.

        Args:
            message: Error message
            error: Exception instance
            **context: Additional context
        """
        self.error(
            message,
            exc_info=(type(error), error, error.__traceback__),
            extra={
                "error_type": type(error).__name__,
                "error_message": str(error),
                **context,
            },
        )

    def log_llm_call(
        self,
        model: str,
        provider: str,
        duration_ms: float,
        tokens_used: int = 0,
        **metadata: Any
    ) -> None:
        """
        Log LLM calls for monitoring and cost tracking.

        Args:
            model: Model name
            provider: LLM provider
            duration_ms: Call duration in milliseconds
            tokens_used: Number of tokens used
            **metadata: Additional metadata
        """
        self.info(
            f"LLM call: {provider}/{model} - {tokens_used} tokens in {duration_ms:.2f}ms",
            extra={
                "llm_provider": provider,
                "llm_model": model,
                "duration_ms": duration_ms,
                "tokens_used": tokens_used,
                "metric_type": "llm_call",
                **metadata,
            },
        )


def get_logger(name: str) -> ProductionLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured ProductionLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Run stored", extra={"run_id": run.id})
        logger.log_performance("evaluate_task", 45.2, runner_id="rag.bm25")
    """
    settings = get_settings()

    base_logger = logging.getLogger(name)

    if not base_logger.handlers:
        log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
        base_logger.setLevel(log_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

        if settings.environment == "production" or settings.log_format == "json":
            formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )

        handler.setFormatter(formatter)
        base_logger.addHandler(handler)

        # Prevent propagation to root logger
        base_logger.propagate = False

    return ProductionLogger(base_logger, {})


def set_run_context(
    run_id: str | None = None,
    task_id: str | None = None,
) -> None:
    """
    Set run context for logging.

    Args:
        run_id: Run record identifier
        task_id: Unit of work identifier
    """
    if run_id:
        run_id_context.set(run_id)
    if task_id:
        task_id_context.set(task_id)


def clear_run_context() -> None:
    """Clear run context."""
    run_id_context.set(None)
    task_id_context.set(None)
