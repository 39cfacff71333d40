"""Data types for workflow execution requests, runs and results."""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from ghrun.core.exceptions import CleanupWarning


class ExecutionRequest(BaseModel):
    """Caller request to execute a workflow.

    Exactly one of workflow_yaml or workflow_path must be set; the
    orchestrator enforces this before touching the remote repository.
    """

    model_config = ConfigDict(extra="ignore")

    workflow_yaml: Optional[str] = None
    workflow_path: Optional[str] = None
    branch_name: Optional[str] = None

    @field_validator("workflow_yaml", "workflow_path", "branch_name", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty and whitespace-only strings as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("branch_name")
    @classmethod
    def trim_branch_name(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace from branch name."""
        return v.strip() if v is not None else None


@dataclass
class EphemeralBranch:
    """Short-lived branch hosting one execution's workflow file.

    Attributes:
        name: Branch name
        base_sha: Commit SHA the branch was created from
        created: True only once the remote create-ref call succeeded
        cleaned_up: None until cleanup runs, then whether deletion succeeded
        cleanup_warning: Set when deletion failed
    """

    name: str
    base_sha: str = ""
    created: bool = False
    cleaned_up: Optional[bool] = None
    cleanup_warning: Optional["CleanupWarning"] = None

    @property
    def disposition(self) -> str:
        """Human-readable final state of the branch."""
        if not self.created:
            return "not created"
        if self.cleaned_up is None:
            return "pending cleanup"
        return "cleaned up" if self.cleaned_up else "cleanup failed"


class ValidationIssue(BaseModel):
    """A single problem reported by a workflow validator."""

    title: str
    detail: Optional[str] = None
    code: Optional[str] = None

    def describe(self) -> str:
        """Render as "title: detail", falling back to the code."""
        return f"{self.title}: {self.detail or self.code}"


class ValidationOutcome(BaseModel):
    """Verdict of a workflow validation."""

    ok: bool
    errors: List[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def passed(cls) -> "ValidationOutcome":
        return cls(ok=True)

    @classmethod
    def failed(cls, errors: List[ValidationIssue]) -> "ValidationOutcome":
        return cls(ok=False, errors=errors)


class RunHandle(BaseModel):
    """Reference to a remote workflow run. Observed, never owned."""

    id: int
    status: Optional[str] = None
    conclusion: Optional[str] = None
    html_url: Optional[str] = None

    @classmethod
    def from_api(cls, row: dict) -> "RunHandle":
        """Create RunHandle from a GitHub workflow run payload."""
        return cls(
            id=row["id"],
            status=row.get("status"),
            conclusion=row.get("conclusion"),
            html_url=row.get("html_url"),
        )


class RunStatus(RunHandle):
    """Detailed status of a workflow run."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, row: dict) -> "RunStatus":
        """Create RunStatus from a GitHub workflow run payload."""
        return cls(
            id=row["id"],
            status=row.get("status"),
            conclusion=row.get("conclusion"),
            html_url=row.get("html_url"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class JobSummary(BaseModel):
    """Summary of one job within a workflow run."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: Optional[str] = None
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    html_url: Optional[str] = None

    @classmethod
    def from_api(cls, row: dict) -> "JobSummary":
        """Create JobSummary from a GitHub job payload."""
        return cls(
            name=row["name"],
            status=row.get("status"),
            conclusion=row.get("conclusion"),
            started_at=row.get("started_at"),
            completed_at=row.get("completed_at"),
            html_url=row.get("html_url"),
        )


class ExecutionResult(BaseModel):
    """Terminal artifact of a successful workflow execution."""

    model_config = ConfigDict(frozen=True)

    status: Optional[str] = None
    conclusion: Optional[str] = None
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    jobs: List[JobSummary] = Field(default_factory=list)

    @classmethod
    def from_run(cls, run: RunStatus, jobs: List[JobSummary]) -> "ExecutionResult":
        """Build the result from a completed run and its jobs."""
        return cls(
            status=run.status,
            conclusion=run.conclusion,
            html_url=run.html_url,
            created_at=run.created_at,
            updated_at=run.updated_at,
            jobs=list(jobs),
        )

    def to_json(self) -> str:
        """Serialize for the tool response payload."""
        return self.model_dump_json(indent=2)
