"""Workflow execution package.

Main components:
- validator: WorkflowValidator contract and the bundled-schema validator
- mutator: trigger rewrite to ``on: push``
- poller: RunPoller state machine observing a run to completion
- orchestrator: WorkflowExecutor end-to-end pipeline with branch cleanup
- workflow_io: stage logging helpers
"""

from ghrun.core.workflow.mutator import PUSH_TRIGGER, mutate_trigger
from ghrun.core.workflow.orchestrator import WorkflowExecutor, resolve_source
from ghrun.core.workflow.poller import PollState, RunPoller
from ghrun.core.workflow.validator import (
    SchemaWorkflowValidator,
    WorkflowValidator,
    validate_document,
)

__all__ = [
    "PUSH_TRIGGER",
    "PollState",
    "RunPoller",
    "SchemaWorkflowValidator",
    "WorkflowExecutor",
    "WorkflowValidator",
    "mutate_trigger",
    "resolve_source",
    "validate_document",
]
