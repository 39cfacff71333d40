"""Entry point for running ghrun as a module.

This allows the CLI to be executed using:
    python -m ghrun execute --workflow-path <path>
"""

from ghrun.cli.cli import app

if __name__ == "__main__":
    app()
