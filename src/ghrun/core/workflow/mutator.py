"""Trigger mutation for workflow documents.

A pushed workflow only starts a run if its trigger matches the push event,
so the trigger is replaced with a plain ``push``. The original trigger is
discarded, not merged; it is logged so callers can see what was dropped.
"""

import json
import logging

from ghrun.core.exceptions import MalformedDocumentError
from ghrun.core.workflow.document import TRIGGER_KEY, YAMLError, dump_document, load_document

logger = logging.getLogger(__name__)

PUSH_TRIGGER = "push"


def mutate_trigger(document: str) -> str:
    """Rewrite a workflow's trigger to an unconditional push.

    Only the trigger value changes; every other field keeps its value, key
    order, comments and quoting.

    Args:
        document: Workflow YAML text

    Returns:
        Re-serialized YAML with ``on: push``

    Raises:
        MalformedDocumentError: If the text is not YAML or its root is not a mapping
    """
    logger.debug("Starting workflow trigger mutation")

    try:
        workflow = load_document(document)
    except YAMLError as e:
        logger.error("Workflow mutation failed: invalid YAML: %s", e)
        raise MalformedDocumentError(f"Failed to mutate workflow trigger: {e}") from e

    if not workflow or not isinstance(workflow, dict):
        logger.error("Workflow mutation failed: invalid YAML structure")
        raise MalformedDocumentError(
            "Failed to mutate workflow trigger: Invalid workflow YAML structure"
        )

    original_trigger = workflow.get(TRIGGER_KEY)
    workflow[TRIGGER_KEY] = PUSH_TRIGGER

    mutated = dump_document(workflow)

    logger.info(
        "Workflow trigger mutated (original=%s, new=%s, original_length=%d, mutated_length=%d)",
        json.dumps(original_trigger, default=str),
        PUSH_TRIGGER,
        len(document),
        len(mutated),
    )
    if original_trigger not in (None, PUSH_TRIGGER):
        logger.warning(
            "Original trigger %s was replaced with '%s' and will not be honored",
            json.dumps(original_trigger, default=str),
            PUSH_TRIGGER,
        )

    return mutated
