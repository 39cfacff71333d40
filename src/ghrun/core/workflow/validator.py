"""Workflow validation.

WorkflowValidator is the validation contract. SchemaWorkflowValidator checks
documents against a bundled GitHub Actions workflow JSON schema.
validate_document() is the orchestrator-side integration that logs the
outcome and fails fast with a tagged ValidationError.
"""

import json
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from ghrun.core.exceptions import ValidationError, ValidationKind
from ghrun.core.models import ValidationIssue, ValidationOutcome
from ghrun.core.workflow.document import YAMLError, load_document, to_plain

logger = logging.getLogger(__name__)

SCHEMA_RESOURCE = "schema/workflow.schema.json"


class WorkflowValidator(ABC):
    """Checks a workflow document against the provider's rules. No side effects."""

    @abstractmethod
    def validate(self, document: str) -> ValidationOutcome:
        ...


@lru_cache()
def load_workflow_schema() -> Dict[str, Any]:
    """Load the bundled workflow JSON schema."""
    schema_file = resources.files("ghrun.core.workflow").joinpath(SCHEMA_RESOURCE)
    return json.loads(schema_file.read_text(encoding="utf-8"))


def _json_path(path) -> str:
    parts = ["$"]
    for element in path:
        if isinstance(element, int):
            parts.append(f"[{element}]")
        else:
            parts.append(f".{element}")
    return "".join(parts)


class SchemaWorkflowValidator(WorkflowValidator):
    """Validates workflow YAML with jsonschema against the bundled schema."""

    def __init__(self, schema: Optional[Dict[str, Any]] = None) -> None:
        self._validator = Draft202012Validator(schema or load_workflow_schema())

    def validate(self, document: str) -> ValidationOutcome:
        try:
            workflow = load_document(document)
        except YAMLError as e:
            return ValidationOutcome.failed(
                [ValidationIssue(title="YAML syntax error", detail=str(e), code="yaml")]
            )

        if not isinstance(workflow, dict):
            return ValidationOutcome.failed(
                [
                    ValidationIssue(
                        title="Invalid workflow structure",
                        detail="workflow root must be a mapping",
                        code="type",
                    )
                ]
            )

        errors = sorted(
            self._validator.iter_errors(to_plain(workflow)),
            key=lambda error: list(error.absolute_path),
        )
        if not errors:
            return ValidationOutcome.passed()

        return ValidationOutcome.failed(
            [
                ValidationIssue(
                    title=error.message,
                    detail=_json_path(error.absolute_path),
                    code=str(error.validator),
                )
                for error in errors
            ]
        )


def format_issues(errors: List[ValidationIssue]) -> str:
    """Join issues one per line as "title: detail"."""
    return "\n".join(issue.describe() for issue in errors)


def validate_document(
    validator: WorkflowValidator,
    document: str,
    kind: ValidationKind = "original",
) -> ValidationOutcome:
    """Validate a document and fail fast on errors.

    Args:
        validator: Validator collaborator
        document: Workflow YAML text
        kind: "original" for caller input, "mutated" for the rewritten document

    Returns:
        The passing ValidationOutcome

    Raises:
        ValidationError: If validation fails or the validator itself errors
    """
    logger.debug("Starting workflow validation (%s), length=%d", kind, len(document))

    try:
        outcome = validator.validate(document)
    except Exception as e:
        logger.error("Failed to validate workflow YAML (%s): %s", kind, e)
        raise ValidationError(kind, [], f"Failed to validate workflow YAML ({kind}): {e}") from e

    if not outcome.ok:
        logger.info(
            "Workflow validation (%s): failed with %d error(s)", kind, len(outcome.errors)
        )
        message = f"Workflow validation failed ({kind}):\n{format_issues(outcome.errors)}"
        if kind == "mutated":
            message += "\nThe rewritten workflow is invalid; this is an internal mutation error."
        logger.error(message)
        raise ValidationError(kind, outcome.errors, message)

    logger.info("Workflow validation (%s): passed", kind)
    return outcome
