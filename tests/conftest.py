"""Shared fixtures and test doubles."""

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from ghrun.core.exceptions import BranchAlreadyExistsError
from ghrun.core.github import RepositoryClient
from ghrun.core.models import JobSummary, RunHandle, RunStatus

SAMPLE_WORKFLOW = (
    "name: T\n"
    "on: workflow_dispatch\n"
    "jobs: {t: {runs-on: ubuntu-latest, steps: [{run: echo hi}]}}"
)


class FakeRepositoryClient(RepositoryClient):
    """In-memory repository that records calls and injects failures.

    Args:
        statuses: Run statuses returned by successive get_run calls; the
            last one repeats once the list is exhausted
        fail_on: Mapping of operation name to the exception it raises
    """

    def __init__(
        self,
        *,
        default_branch: str = "main",
        head_sha: str = "abc123",
        existing_branches: Iterable[str] = (),
        runs: Optional[List[RunHandle]] = None,
        statuses: Optional[List[RunStatus]] = None,
        jobs: Optional[List[JobSummary]] = None,
        fail_on: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.default_branch = default_branch
        self.head_sha = head_sha
        self.branches = {default_branch, *existing_branches}
        self.files: Dict[Tuple[str, str], str] = {}
        self.runs = [RunHandle(id=42, status="queued")] if runs is None else runs
        self.statuses = statuses or [completed_run()]
        self.jobs = jobs if jobs is not None else [make_job("t")]
        self.fail_on = dict(fail_on or {})
        self.calls: List[Tuple[str, tuple]] = []

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        if operation in self.fail_on:
            raise self.fail_on[operation]

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def count(self, operation: str) -> int:
        return self.call_names.count(operation)

    async def get_default_branch(self) -> str:
        self._record("get_default_branch")
        return self.default_branch

    async def get_branch_head_sha(self, branch: str) -> str:
        self._record("get_branch_head_sha", branch)
        return self.head_sha

    async def create_branch(self, name: str, from_sha: str) -> None:
        self._record("create_branch", name, from_sha)
        if name in self.branches:
            raise BranchAlreadyExistsError(name)
        self.branches.add(name)

    async def put_file(self, path: str, content: str, branch: str, message: str) -> None:
        self._record("put_file", path, content, branch, message)
        self.files[(branch, path)] = content

    async def list_runs_for_branch(self, branch: str, limit: int = 1) -> List[RunHandle]:
        self._record("list_runs_for_branch", branch, limit)
        return self.runs[:limit]

    async def get_run(self, run_id: int) -> RunStatus:
        self._record("get_run", run_id)
        index = min(self.count("get_run") - 1, len(self.statuses) - 1)
        return self.statuses[index]

    async def list_jobs_for_run(self, run_id: int) -> List[JobSummary]:
        self._record("list_jobs_for_run", run_id)
        return self.jobs

    async def delete_branch(self, name: str) -> None:
        self._record("delete_branch", name)
        self.branches.discard(name)


def running_run(run_id: int = 42) -> RunStatus:
    return RunStatus(id=run_id, status="in_progress")


def completed_run(run_id: int = 42, conclusion: str = "success") -> RunStatus:
    return RunStatus(
        id=run_id,
        status="completed",
        conclusion=conclusion,
        html_url=f"https://github.com/octo/demo/actions/runs/{run_id}",
        created_at="2024-05-01T10:00:00Z",
        updated_at="2024-05-01T10:02:00Z",
    )


def make_job(name: str, conclusion: str = "success") -> JobSummary:
    return JobSummary(
        name=name,
        status="completed",
        conclusion=conclusion,
        started_at="2024-05-01T10:00:10Z",
        completed_at="2024-05-01T10:01:50Z",
        html_url="https://github.com/octo/demo/actions/runs/42/job/1",
    )


async def no_sleep(seconds: float) -> None:
    """Sleep replacement that returns immediately."""
    return None


@pytest.fixture
def fake_client():
    """Repository double whose run completes on the first poll."""
    return FakeRepositoryClient()


@pytest.fixture
def sample_workflow():
    """Workflow triggered by workflow_dispatch with a single job."""
    return SAMPLE_WORKFLOW


@pytest.fixture
def github_env(monkeypatch):
    """Mock required GitHub environment variables."""
    monkeypatch.setenv("GITHUB_OWNER", "octo")
    monkeypatch.setenv("GITHUB_REPO", "demo")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test_token")
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
