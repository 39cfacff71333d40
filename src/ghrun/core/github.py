"""GitHub repository client used by the workflow orchestrator.

RepositoryClient describes the remote operations the orchestrator needs.
GitHubClient implements them over the GitHub REST API with httpx.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Collection, Dict, List, Optional, TypeVar
from urllib.parse import quote

import httpx

from ghrun import __version__
from ghrun.core.config import GitHubConfig
from ghrun.core.exceptions import BranchAlreadyExistsError, RemoteAPIError
from ghrun.core.models import JobSummary, RunHandle, RunStatus

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"

T = TypeVar("T")


class RepositoryClient(ABC):
    """Remote operations on a single repository.

    Every method raises RemoteAPIError on failure.
    """

    @abstractmethod
    async def get_default_branch(self) -> str:
        """Return the repository's default branch name."""
        ...

    @abstractmethod
    async def get_branch_head_sha(self, branch: str) -> str:
        """Return the commit SHA at the head of a branch."""
        ...

    @abstractmethod
    async def create_branch(self, name: str, from_sha: str) -> None:
        """Create a branch at a commit.

        Raises:
            BranchAlreadyExistsError: If the branch name is taken
        """
        ...

    @abstractmethod
    async def put_file(self, path: str, content: str, branch: str, message: str) -> None:
        """Create or overwrite a file on a branch with a single commit."""
        ...

    @abstractmethod
    async def list_runs_for_branch(self, branch: str, limit: int = 1) -> List[RunHandle]:
        """List the most recent workflow runs for a branch, newest first."""
        ...

    @abstractmethod
    async def get_run(self, run_id: int) -> RunStatus:
        """Fetch the current status of a workflow run."""
        ...

    @abstractmethod
    async def list_jobs_for_run(self, run_id: int) -> List[JobSummary]:
        """List the jobs of a workflow run."""
        ...

    @abstractmethod
    async def delete_branch(self, name: str) -> None:
        """Delete a branch."""
        ...


def _error_message(response: httpx.Response) -> str:
    """Extract the provider's error message from a response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text or response.reason_phrase


class GitHubClient(RepositoryClient):
    """RepositoryClient backed by the GitHub REST API."""

    def __init__(
        self,
        config: GitHubConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Target repository and credentials
            http_client: Optional preconfigured httpx client (used in tests)
        """
        self.owner = config.owner
        self.repo = config.repo
        self._http = http_client or httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.timeout,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": f"ghrun/{__version__}",
            },
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{quote(self.owner)}/{quote(self.repo)}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        allow_status: Collection[int] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, translating failures into RemoteAPIError."""
        logger.debug(
            "GitHub API: %s (owner=%s, repo=%s, %s %s)",
            operation,
            self.owner,
            self.repo,
            method,
            path,
        )
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("GitHub API %s transport error: %s", operation, e)
            raise RemoteAPIError(operation, None, str(e)) from e

        if response.is_success or response.status_code in allow_status:
            return response

        message = _error_message(response)
        logger.debug(
            "GitHub API %s failed with status %d: %s",
            operation,
            response.status_code,
            message,
        )
        raise RemoteAPIError(operation, response.status_code, message)

    @staticmethod
    def _parse(operation: str, response: httpx.Response, parser: Callable[[Any], T]) -> T:
        """Decode a success body, translating malformed payloads into RemoteAPIError."""
        try:
            return parser(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("GitHub API %s returned an unexpected body: %s", operation, e)
            raise RemoteAPIError(
                operation, response.status_code, f"Unexpected response body: {e!r}"
            ) from e

    async def get_default_branch(self) -> str:
        response = await self._request("get-repository", "GET", self._repo_path)
        default_branch, private = self._parse(
            "get-repository",
            response,
            lambda data: (data["default_branch"], data.get("private")),
        )
        logger.info(
            "Retrieved repository information (default_branch=%s, private=%s)",
            default_branch,
            private,
        )
        return default_branch

    async def get_branch_head_sha(self, branch: str) -> str:
        response = await self._request(
            "get-ref",
            "GET",
            f"{self._repo_path}/git/ref/heads/{quote(branch, safe='/')}",
        )
        sha = self._parse("get-ref", response, lambda data: data["object"]["sha"])
        logger.debug("Retrieved head SHA of %s: %s", branch, sha)
        return sha

    async def create_branch(self, name: str, from_sha: str) -> None:
        try:
            await self._request(
                "create-ref",
                "POST",
                f"{self._repo_path}/git/refs",
                json={"ref": f"refs/heads/{name}", "sha": from_sha},
            )
        except RemoteAPIError as e:
            if e.status_code == 422 and "already exists" in e.message.lower():
                raise BranchAlreadyExistsError(name, e.status_code, e.message) from e
            raise

    async def _get_file_sha(self, path: str, branch: str) -> Optional[str]:
        response = await self._request(
            "get-content",
            "GET",
            f"{self._repo_path}/contents/{quote(path, safe='/')}",
            params={"ref": branch},
            allow_status={404},
        )
        if response.status_code == 404:
            return None
        return self._parse(
            "get-content",
            response,
            lambda data: data.get("sha") if isinstance(data, dict) else None,
        )

    async def put_file(self, path: str, content: str, branch: str, message: str) -> None:
        body: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        existing_sha = await self._get_file_sha(path, branch)
        if existing_sha:
            logger.debug("Overwriting existing %s (sha=%s)", path, existing_sha)
            body["sha"] = existing_sha

        await self._request(
            "create-file",
            "PUT",
            f"{self._repo_path}/contents/{quote(path, safe='/')}",
            json=body,
        )

    async def list_runs_for_branch(self, branch: str, limit: int = 1) -> List[RunHandle]:
        response = await self._request(
            "list-workflow-runs",
            "GET",
            f"{self._repo_path}/actions/runs",
            params={"branch": branch, "per_page": limit},
        )
        runs, total = self._parse(
            "list-workflow-runs",
            response,
            lambda data: (
                [RunHandle.from_api(row) for row in data.get("workflow_runs", [])],
                data.get("total_count"),
            ),
        )
        logger.info("Retrieved workflow runs (count=%d, total=%s)", len(runs), total)
        return runs[:limit]

    async def get_run(self, run_id: int) -> RunStatus:
        response = await self._request(
            "get-workflow-run",
            "GET",
            f"{self._repo_path}/actions/runs/{run_id}",
        )
        return self._parse("get-workflow-run", response, RunStatus.from_api)

    async def list_jobs_for_run(self, run_id: int) -> List[JobSummary]:
        response = await self._request(
            "list-jobs",
            "GET",
            f"{self._repo_path}/actions/runs/{run_id}/jobs",
        )
        return self._parse(
            "list-jobs",
            response,
            lambda data: [JobSummary.from_api(row) for row in data.get("jobs", [])],
        )

    async def delete_branch(self, name: str) -> None:
        await self._request(
            "delete-ref",
            "DELETE",
            f"{self._repo_path}/git/refs/heads/{quote(name, safe='/')}",
        )
