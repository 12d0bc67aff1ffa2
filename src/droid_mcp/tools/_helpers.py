"""Shared helpers for MCP tool handlers."""

from typing import Any


def _drop_none(**params: Any) -> dict[str, Any]:
    """Build a command params object, leaving out arguments the caller omitted."""
    return {key: value for key, value in params.items() if value is not None}
