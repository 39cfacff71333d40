"""Polling of workflow runs until completion or timeout."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from ghrun.core.config import PollerConfig
from ghrun.core.exceptions import PollTimeoutError
from ghrun.core.github import RepositoryClient
from ghrun.core.models import ExecutionResult

logger = logging.getLogger(__name__)

TERMINAL_STATUS = "completed"

Sleep = Callable[[float], Awaitable[None]]


class PollState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class RunPoller:
    """Observes a workflow run until it reports the terminal status.

    Only the ``completed`` status ends polling; the conclusion is reported
    in the result but never short-circuits it. Remote errors propagate
    without retry.
    """

    def __init__(
        self,
        client: RepositoryClient,
        interval_seconds: float = 10.0,
        max_attempts: int = 60,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if interval_seconds < 0:
            raise ValueError("interval_seconds cannot be negative")
        self.client = client
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self._sleep = sleep
        self.state = PollState.PENDING
        self.attempts = 0

    @classmethod
    def from_config(
        cls,
        client: RepositoryClient,
        config: PollerConfig,
        sleep: Sleep = asyncio.sleep,
    ) -> "RunPoller":
        return cls(
            client,
            interval_seconds=config.interval_seconds,
            max_attempts=config.max_attempts,
            sleep=sleep,
        )

    async def poll(self, run_id: int) -> ExecutionResult:
        """Poll a run to completion.

        Args:
            run_id: Workflow run ID

        Returns:
            ExecutionResult built from the completed run and its jobs

        Raises:
            PollTimeoutError: If no tick observes the terminal status
            RemoteAPIError: If a status or job fetch fails
        """
        self.state = PollState.PENDING
        self.attempts = 0

        logger.info(
            "Starting workflow polling (run_id=%s, max_attempts=%d, interval=%gs, "
            "max_timeout_minutes=%g)",
            run_id,
            self.max_attempts,
            self.interval_seconds,
            self.interval_seconds * self.max_attempts / 60,
        )

        result: Optional[ExecutionResult] = None
        while self.attempts < self.max_attempts:
            self.attempts += 1
            logger.debug(
                "Polling attempt %d/%d for run %s", self.attempts, self.max_attempts, run_id
            )

            run = await self.client.get_run(run_id)
            logger.debug(
                "Workflow run %s status=%s conclusion=%s updated_at=%s",
                run_id,
                run.status,
                run.conclusion,
                run.updated_at,
            )

            if run.status == TERMINAL_STATUS:
                logger.info(
                    "Workflow run %s completed (conclusion=%s) after %d attempt(s), "
                    "fetching job details",
                    run_id,
                    run.conclusion,
                    self.attempts,
                )
                jobs = await self.client.list_jobs_for_run(run_id)
                logger.info(
                    "Retrieved %d job(s): %s",
                    len(jobs),
                    ", ".join(f"{job.name}={job.conclusion or job.status}" for job in jobs),
                )
                result = ExecutionResult.from_run(run, jobs)
                self.state = PollState.COMPLETED
                break

            self.state = PollState.RUNNING
            if self.attempts < self.max_attempts:
                logger.debug(
                    "Workflow still %s, waiting %gs before next poll (%d remaining)",
                    run.status,
                    self.interval_seconds,
                    self.max_attempts - self.attempts,
                )
                await self._sleep(self.interval_seconds)

        if result is None:
            self.state = PollState.TIMED_OUT
            error = PollTimeoutError(run_id, self.max_attempts, self.interval_seconds)
            logger.error("Workflow polling timeout: %s", error)
            raise error

        return result
