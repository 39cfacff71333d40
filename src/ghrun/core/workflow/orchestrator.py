"""End-to-end workflow execution pipeline.

WorkflowExecutor validates a workflow, rewrites its trigger to push,
re-validates it, commits it to an ephemeral branch, waits for the resulting
run to finish and returns its results. The ephemeral branch is deleted on
every exit path once it has been created.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

from ghrun.core.exceptions import (
    CleanupWarning,
    ExecutionError,
    NoRunTriggeredError,
    SourceResolutionError,
)
from ghrun.core.github import RepositoryClient
from ghrun.core.models import EphemeralBranch, ExecutionRequest, ExecutionResult
from ghrun.core.utils import make_branch_name
from ghrun.core.workflow.mutator import mutate_trigger
from ghrun.core.workflow.poller import RunPoller, Sleep
from ghrun.core.workflow.validator import WorkflowValidator, validate_document
from ghrun.core.workflow.workflow_io import log_cleanup, log_stage, log_stage_failed

logger = logging.getLogger(__name__)

WORKFLOW_FILE_PATH = ".github/workflows/ghrun-executed-workflow.yml"
COMMIT_MESSAGE = "Add ghrun executed workflow"

# Pipeline stages, in execution order
STAGE_RESOLVE_SOURCE = "resolve-source"
STAGE_VALIDATE_ORIGINAL = "validate-original"
STAGE_MUTATE_TRIGGER = "mutate-trigger"
STAGE_VALIDATE_MUTATED = "validate-mutated"
STAGE_CREATE_BRANCH = "create-branch"
STAGE_PUSH_WORKFLOW = "push-workflow"
STAGE_CHECK_RUNS = "check-runs"
STAGE_POLL_COMPLETION = "poll-completion"


async def resolve_source(request: ExecutionRequest) -> str:
    """Return the workflow text named by a request.

    Raises:
        SourceResolutionError: If neither or both sources are given, or the
            path cannot be read
    """
    if request.workflow_yaml and request.workflow_path:
        raise SourceResolutionError("Provide only one of workflow_yaml or workflow_path")

    if request.workflow_yaml:
        logger.info("Using provided workflow YAML (length=%d)", len(request.workflow_yaml))
        return request.workflow_yaml

    if not request.workflow_path:
        raise SourceResolutionError("Either workflow_yaml or workflow_path must be provided")

    path = Path(request.workflow_path).expanduser()
    logger.debug("Reading workflow from file %s", path)
    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read workflow file %s: %s", path, e)
        raise SourceResolutionError(f"Failed to read workflow file {path}: {e}") from e

    logger.info("Read workflow file %s (length=%d)", path, len(content))
    return content


class WorkflowExecutor:
    """Runs one workflow execution request at a time."""

    def __init__(
        self,
        client: RepositoryClient,
        validator: WorkflowValidator,
        poller: RunPoller,
        *,
        workflow_path: str = WORKFLOW_FILE_PATH,
        commit_message: str = COMMIT_MESSAGE,
        settle_seconds: float = 2.0,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the executor.

        Args:
            client: Remote repository collaborator
            validator: Workflow validator collaborator
            poller: Run poller used once a run is found
            workflow_path: Repository path the mutated workflow is committed to
            commit_message: Message of the workflow commit
            settle_seconds: Delay between the commit and listing runs
            sleep: Awaitable sleep, injectable for tests
            clock: Time source for generated branch names
        """
        self.client = client
        self.validator = validator
        self.poller = poller
        self.workflow_path = workflow_path
        self.commit_message = commit_message
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._clock = clock

    @asynccontextmanager
    async def ephemeral_branch(self, branch: EphemeralBranch) -> AsyncIterator[EphemeralBranch]:
        """Scope owning an ephemeral branch.

        On exit, a branch marked created is deleted exactly once. Deletion
        failures are logged and recorded on the branch, never raised.
        """
        try:
            yield branch
        finally:
            if branch.created:
                await self._cleanup(branch)

    async def _cleanup(self, branch: EphemeralBranch) -> None:
        log_stage("cleaning-up", branch.name)
        try:
            await self.client.delete_branch(branch.name)
        except Exception as e:
            branch.cleaned_up = False
            branch.cleanup_warning = CleanupWarning(f"Failed to cleanup branch {branch.name}: {e}")
            log_cleanup(branch.name, False, e)
            return
        branch.cleaned_up = True
        log_cleanup(branch.name, True)

    async def _create_branch(self, branch: EphemeralBranch) -> None:
        default_branch = await self.client.get_default_branch()
        branch.base_sha = await self.client.get_branch_head_sha(default_branch)
        logger.debug("Default branch %s is at %s", default_branch, branch.base_sha)

        log_stage("creating-branch", branch.name, from_sha=branch.base_sha)
        await self.client.create_branch(branch.name, branch.base_sha)
        branch.created = True
        logger.info("Branch created successfully: %s at %s", branch.name, branch.base_sha)

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute a workflow end to end.

        Args:
            request: Execution request naming the workflow source

        Returns:
            ExecutionResult of the completed run

        Raises:
            ExecutionError: Wrapping the typed error of the failing stage
        """
        stage = STAGE_RESOLVE_SOURCE
        branch: Optional[EphemeralBranch] = None

        try:
            document = await resolve_source(request)

            stage = STAGE_VALIDATE_ORIGINAL
            log_stage("validating-original")
            validate_document(self.validator, document, "original")

            stage = STAGE_MUTATE_TRIGGER
            log_stage("mutating-trigger")
            mutated = mutate_trigger(document)

            stage = STAGE_VALIDATE_MUTATED
            log_stage("validating-mutated")
            validate_document(self.validator, mutated, "mutated")

            branch = EphemeralBranch(name=request.branch_name or make_branch_name(self._clock))
            logger.info(
                "Workflow processing complete, starting GitHub operations "
                "(branch=%s, path=%s)",
                branch.name,
                self.workflow_path,
            )

            async with self.ephemeral_branch(branch):
                stage = STAGE_CREATE_BRANCH
                await self._create_branch(branch)

                stage = STAGE_PUSH_WORKFLOW
                log_stage("pushing-workflow", branch.name, path=self.workflow_path)
                await self.client.put_file(
                    self.workflow_path, mutated, branch.name, self.commit_message
                )
                logger.info("Workflow file pushed to %s on %s", self.workflow_path, branch.name)

                stage = STAGE_CHECK_RUNS
                logger.debug("Waiting %gs for GitHub to process the push", self.settle_seconds)
                await self._sleep(self.settle_seconds)
                log_stage("checking-runs", branch.name)
                runs = await self.client.list_runs_for_branch(branch.name, limit=1)
                if not runs:
                    raise NoRunTriggeredError(branch.name)

                run = runs[0]
                logger.info(
                    "Found workflow run %s (status=%s, url=%s)", run.id, run.status, run.html_url
                )

                stage = STAGE_POLL_COMPLETION
                log_stage("polling-completion", branch.name, run_id=run.id)
                result = await self.poller.poll(run.id)

            logger.info(
                "Workflow execution completed (status=%s, conclusion=%s, branch %s)",
                result.status,
                result.conclusion,
                branch.disposition,
            )
            return result

        except Exception as e:
            branch_name = branch.name if branch else None
            disposition = branch.disposition if branch else "not created"
            log_stage_failed(stage, e, branch_name)
            raise ExecutionError(stage, e, branch_name, disposition) from e
