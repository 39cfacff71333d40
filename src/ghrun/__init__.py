"""ghrun - on-demand GitHub Actions workflow execution."""

from importlib import metadata

__all__ = ["cli", "core", "tool"]

try:
    __version__ = metadata.version("ghrun")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
