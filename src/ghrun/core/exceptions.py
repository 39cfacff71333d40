"""Error taxonomy for workflow execution.

Every failure raised while executing a workflow derives from GhrunError.
The orchestrator wraps stage failures in ExecutionError so callers always
learn which stage failed and what happened to the ephemeral branch.
"""

from typing import TYPE_CHECKING, List, Literal, Optional

if TYPE_CHECKING:
    from ghrun.core.models import ValidationIssue

ValidationKind = Literal["original", "mutated"]


class GhrunError(RuntimeError):
    """Base class for all ghrun errors."""


class ConfigurationError(GhrunError):
    """Raised when required configuration is missing or invalid."""


class SourceResolutionError(GhrunError):
    """Raised when no workflow document can be resolved from a request."""


class MalformedDocumentError(GhrunError):
    """Raised when a workflow document is not a YAML mapping."""


class ValidationError(GhrunError):
    """Raised when a workflow document fails validation.

    Attributes:
        kind: Which document failed ("original" or "mutated")
        errors: The validation issues reported by the validator
    """

    def __init__(self, kind: ValidationKind, errors: List["ValidationIssue"], message: str):
        self.kind = kind
        self.errors = errors
        super().__init__(message)

    @property
    def is_internal(self) -> bool:
        """A mutated document failing validation is a mutation bug, not caller error."""
        return self.kind == "mutated"


class RemoteAPIError(GhrunError):
    """Raised when a call to the hosting provider fails.

    Attributes:
        operation: Name of the remote operation (e.g. "create-ref")
        status_code: HTTP status code, or None for transport failures
        message: Provider error message
    """

    def __init__(self, operation: str, status_code: Optional[int], message: str):
        self.operation = operation
        self.status_code = status_code
        self.message = message
        status = status_code if status_code is not None else "transport"
        super().__init__(f"GitHub API {operation} failed ({status}): {message}")


class BranchAlreadyExistsError(RemoteAPIError):
    """Raised when the ephemeral branch name is already taken."""

    def __init__(self, branch: str, status_code: Optional[int] = 422, message: str = ""):
        self.branch = branch
        super().__init__(
            "create-ref",
            status_code,
            message or f"Branch '{branch}' already exists",
        )


class NoRunTriggeredError(GhrunError):
    """Raised when pushing the workflow did not start any run."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(
            f"No workflow run was triggered on branch '{branch}'. "
            "Check if the workflow YAML is valid and has appropriate triggers."
        )


class PollTimeoutError(GhrunError):
    """Raised when a run does not reach a terminal status in time."""

    def __init__(self, run_id: int, attempts: int, interval_seconds: float):
        self.run_id = run_id
        self.attempts = attempts
        self.interval_seconds = interval_seconds
        super().__init__(
            f"Workflow run {run_id} did not complete within the timeout period "
            f"({attempts} attempts, {interval_seconds:g}s interval)"
        )


class CleanupWarning(UserWarning):
    """Describes a failed ephemeral branch deletion. Logged, never raised."""


class UnknownToolError(GhrunError):
    """Raised when a tool call names a tool this server does not provide."""


class ExecutionError(GhrunError):
    """Stage-tagged failure surfaced to callers of the orchestrator.

    Attributes:
        stage: Pipeline stage that failed (e.g. "push-workflow")
        cause: The underlying typed error
        branch: Ephemeral branch name, if one was resolved
        branch_disposition: "not created", "cleaned up" or "cleanup failed"
    """

    def __init__(
        self,
        stage: str,
        cause: BaseException,
        branch: Optional[str] = None,
        branch_disposition: str = "not created",
    ):
        self.stage = stage
        self.cause = cause
        self.branch = branch
        self.branch_disposition = branch_disposition
        message = f"Stage '{stage}' failed: {cause}"
        if branch:
            message += f" (branch '{branch}': {branch_disposition})"
        super().__init__(message)


__all__ = [
    "BranchAlreadyExistsError",
    "CleanupWarning",
    "ConfigurationError",
    "ExecutionError",
    "GhrunError",
    "MalformedDocumentError",
    "NoRunTriggeredError",
    "PollTimeoutError",
    "RemoteAPIError",
    "SourceResolutionError",
    "UnknownToolError",
    "ValidationError",
    "ValidationKind",
]
