"""Core components for workflow validation, mutation and execution."""
