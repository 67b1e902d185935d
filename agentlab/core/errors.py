"""Error taxonomy for the evaluation harness."""


class AgentLabError(Exception):
    """Base class for all harness errors."""


class RunnerNotFoundError(AgentLabError):
    """No execution unit is registered under the requested id."""

    def __init__(self, runner_id: str, step_id: str | None = None):
        self.runner_id = runner_id
        self.step_id = step_id
        super().__init__(f"Runner not found: {runner_id}")


class TypeMismatchError(AgentLabError):
    """The execution unit's capability type differs from the task's."""

    def __init__(self, runner_type: str, task_type: str):
        self.runner_type = runner_type
        self.task_type = task_type
        super().__init__(
            f'Runner type mismatch: runner.type="{runner_type}", task.type="{task_type}"'
        )


class MissingStepConfigError(AgentLabError):
    """A scenario step has no configuration or no runner id."""

    def __init__(self, step_id: str, detail: str = "Missing config for step"):
        self.step_id = step_id
        super().__init__(f"{detail}: {step_id}")


class DuplicateRegistrationError(AgentLabError):
    """An id is already present in a registry."""


class NotRegisteredError(AgentLabError, KeyError):
    """Lookup of an unknown id in a strict registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class GenerationParseError(AgentLabError):
    """Text-generation output could not be parsed or failed schema validation."""

    def __init__(self, message: str, raw: str | None = None, error: str | None = None):
        self.raw = raw
        self.error = error
        super().__init__(message)


class RunNotFoundError(AgentLabError):
    """Storage has no run with the given id."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Run not found: {run_id}")
