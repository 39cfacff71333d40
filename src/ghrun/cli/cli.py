"""ghrun CLI - execute GitHub Actions workflows on demand."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from ghrun import __version__
from ghrun.core.config import GitHubConfig, PollerConfig, init_env
from ghrun.core.exceptions import ConfigurationError, MalformedDocumentError
from ghrun.core.utils import setup_logger
from ghrun.core.workflow.mutator import mutate_trigger
from ghrun.core.workflow.validator import SchemaWorkflowValidator, format_issues
from ghrun.tool import (
    TOOL_NAME,
    ToolResponse,
    build_executor,
    build_github_client,
    call_tool,
    tool_definition,
)

# Load environment variables
init_env()

app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=True,
    help="ghrun CLI - Execute GitHub Actions workflows on an ephemeral branch",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"ghrun version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """ghrun CLI - Execute GitHub Actions workflows on an ephemeral branch."""
    pass


def _read_file(file_path: Path) -> str:
    if not file_path.is_file():
        typer.echo(f"Error: File not found: {file_path}", err=True)
        raise typer.Exit(1)
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        typer.echo(f"Error: File is not valid UTF-8: {file_path}", err=True)
        raise typer.Exit(1)


async def _run_tool(config: GitHubConfig, arguments: Dict[str, Any]) -> ToolResponse:
    poller_config = PollerConfig.from_env()
    async with build_github_client(config) as client:
        executor = build_executor(client, poller_config)
        return await call_tool(TOOL_NAME, arguments, executor)


@app.command()
def execute(
    workflow_yaml: Optional[str] = typer.Option(
        None, "--workflow-yaml", help="Workflow YAML content"
    ),
    workflow_path: Optional[str] = typer.Option(
        None, "--workflow-path", help="Path to a workflow file"
    ),
    branch_name: Optional[str] = typer.Option(
        None, "--branch-name", help="Ephemeral branch name (auto-generated if not provided)"
    ),
):
    """Validate, rewrite the trigger to push, and run a workflow.

    Prints the run result as JSON.

    Example:
        ghrun execute --workflow-path .github/workflows/ci.yml
    """
    logger = setup_logger()

    try:
        config = GitHubConfig.from_env()
    except ConfigurationError as e:
        logger.error("Configuration validation failed: %s", e)
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    arguments = {
        "workflow_yaml": workflow_yaml,
        "workflow_path": workflow_path,
        "branch_name": branch_name,
    }
    response = asyncio.run(_run_tool(config, arguments))

    if response.is_error:
        typer.echo(f"Error: {response.text}", err=True)
        raise typer.Exit(1)

    typer.echo(response.text)


@app.command()
def validate(file_path: Path):
    """Validate a workflow file without running it.

    Example:
        ghrun validate .github/workflows/ci.yml
    """
    outcome = SchemaWorkflowValidator().validate(_read_file(file_path))
    if not outcome.ok:
        typer.echo(format_issues(outcome.errors), err=True)
        raise typer.Exit(1)
    typer.echo("valid")


@app.command()
def mutate(file_path: Path):
    """Print a workflow file with its trigger rewritten to push.

    Example:
        ghrun mutate .github/workflows/ci.yml
    """
    try:
        typer.echo(mutate_trigger(_read_file(file_path)), nl=False)
    except MalformedDocumentError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def tools():
    """Print the tool definition as JSON."""
    typer.echo(json.dumps(tool_definition(), indent=2))


if __name__ == "__main__":
    app()
