"""Shared logging helpers for workflow execution stages."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _format_details(details: dict) -> str:
    return ", ".join(f"{key}={value}" for key, value in details.items())


def log_stage(stage: str, branch_name: Optional[str] = None, **details: Any) -> None:
    """Log the start of a pipeline stage.

    Args:
        stage: Stage name (e.g. "creating-branch")
        branch_name: Ephemeral branch, if already resolved
        **details: Extra context rendered as key=value pairs
    """
    context = {"branch": branch_name or "N/A", **details}
    logger.info(f"Workflow execution: {stage} ({_format_details(context)})")


def log_stage_failed(stage: str, error: BaseException, branch_name: Optional[str] = None) -> None:
    """Log a stage failure that aborts the pipeline."""
    logger.error(f"Workflow execution failed at '{stage}' (branch={branch_name or 'N/A'}): {error}")


def log_cleanup(branch_name: str, success: bool, error: Optional[BaseException] = None) -> None:
    """Log the outcome of ephemeral branch deletion.

    Failures are reported at WARNING; cleanup never escalates.
    """
    if success:
        logger.info(f"Branch cleanup: {branch_name} deleted")
    else:
        logger.warning(f"Branch cleanup: failed to delete {branch_name}: {error}")
