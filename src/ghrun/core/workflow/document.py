"""YAML helpers shared by the validator and the trigger mutator.

Documents are read and written with ruamel.yaml in round-trip mode, which
follows YAML 1.2 the way GitHub reads workflow files: ``on``, ``yes`` and
``off`` stay strings, ``010`` stays decimal and ``12:30`` is not a
sexagesimal number. Round-tripping also keeps comments, quoting and key
order of everything the mutator does not touch.
"""

import datetime
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

TRIGGER_KEY = "on"

__all__ = ["TRIGGER_KEY", "YAMLError", "dump_document", "load_document", "to_plain"]


def _yaml() -> YAML:
    yaml = YAML(typ="rt")
    yaml.preserve_quotes = True
    yaml.width = 4096
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def load_document(text: str) -> Any:
    """Parse workflow YAML text into round-trip nodes.

    Raises:
        YAMLError: If the text is not valid YAML
    """
    return _yaml().load(text)


def dump_document(workflow: Any) -> str:
    """Serialize a document loaded with load_document back to YAML."""
    stream = StringIO()
    _yaml().dump(workflow, stream)
    return stream.getvalue()


def to_plain(node: Any) -> Any:
    """Convert round-trip nodes to plain dicts, lists and scalars.

    Timestamps are rendered back to text, since workflow values are
    strings to GitHub.
    """
    if isinstance(node, dict):
        return {str(key): to_plain(value) for key, value in node.items()}
    if isinstance(node, list):
        return [to_plain(item) for item in node]
    if isinstance(node, (datetime.date, datetime.datetime)):
        return node.isoformat()
    return node
