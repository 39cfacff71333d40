"""Tool invocation boundary for calling agents.

Exposes a single tool, execute_github_actions_workflow, as a plain
request/response function. The transport that carries requests is out of
scope; the CLI is one caller.
"""

import logging
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pydantic import ValidationError as ArgumentsError

from ghrun.core.config import GitHubConfig, PollerConfig
from ghrun.core.exceptions import ExecutionError, UnknownToolError
from ghrun.core.github import GitHubClient, RepositoryClient
from ghrun.core.models import ExecutionRequest
from ghrun.core.workflow.orchestrator import WorkflowExecutor
from ghrun.core.workflow.poller import RunPoller
from ghrun.core.workflow.validator import SchemaWorkflowValidator, WorkflowValidator

logger = logging.getLogger(__name__)

TOOL_NAME = "execute_github_actions_workflow"
TOOL_DESCRIPTION = (
    "Validate, mutate trigger to 'push', re-validate, and execute a GitHub Actions "
    "workflow by pushing it to a new branch and monitoring the run"
)


class ToolResponse(BaseModel):
    """Response of a tool call: the result JSON or an error description."""

    is_error: bool = False
    text: str


def tool_definition() -> Dict[str, Any]:
    """Describe the tool and its input schema."""
    return {
        "name": TOOL_NAME,
        "description": TOOL_DESCRIPTION,
        "inputSchema": {
            "type": "object",
            "properties": {
                "workflow_yaml": {
                    "type": "string",
                    "description": (
                        "The YAML content of the workflow file "
                        "(required if workflow_path is not provided)"
                    ),
                },
                "workflow_path": {
                    "type": "string",
                    "description": (
                        "Path to an existing workflow file "
                        "(required if workflow_yaml is not provided)"
                    ),
                },
                "branch_name": {
                    "type": "string",
                    "description": (
                        "Custom branch name for the workflow execution "
                        "(optional, defaults to auto-generated)"
                    ),
                },
            },
            "required": [],
        },
    }


def build_executor(
    client: RepositoryClient,
    poller_config: Optional[PollerConfig] = None,
    validator: Optional[WorkflowValidator] = None,
) -> WorkflowExecutor:
    """Wire a WorkflowExecutor from its collaborators."""
    poller_config = poller_config or PollerConfig()
    return WorkflowExecutor(
        client,
        validator or SchemaWorkflowValidator(),
        RunPoller.from_config(client, poller_config),
        settle_seconds=poller_config.settle_seconds,
    )


def build_github_client(config: GitHubConfig) -> GitHubClient:
    """Create the GitHub client for the configured repository."""
    logger.info(
        "Initializing GitHub client (owner=%s, repo=%s, token_length=%d)",
        config.owner,
        config.repo,
        len(config.token),
    )
    return GitHubClient(config)


async def call_tool(
    name: str,
    arguments: Optional[Dict[str, Any]],
    executor: WorkflowExecutor,
) -> ToolResponse:
    """Handle one tool call.

    Args:
        name: Tool name
        arguments: Raw tool arguments
        executor: Executor that performs the workflow run

    Returns:
        ToolResponse with the ExecutionResult JSON, or an error description

    Raises:
        UnknownToolError: If name is not a tool this module provides
    """
    started = time.monotonic()
    logger.debug("Incoming request: %s %s", name, arguments)

    if name != TOOL_NAME:
        logger.error("Unknown tool requested: %s", name)
        raise UnknownToolError(f"Unknown tool: {name}")

    try:
        request = ExecutionRequest.model_validate(arguments or {})
    except ArgumentsError as e:
        response = ToolResponse(is_error=True, text=f"Invalid arguments: {e}")
    else:
        try:
            result = await executor.execute(request)
        except ExecutionError as e:
            response = ToolResponse(is_error=True, text=str(e))
        else:
            response = ToolResponse(text=result.to_json())

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Request completed: %s (duration_ms=%d, success=%s)",
        name,
        duration_ms,
        not response.is_error,
    )
    return response
