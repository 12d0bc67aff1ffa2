"""MCP tool registration package.

Call ``register_all_tools(mcp, handler)`` after creating the FastMCP
instance. Every tool forwards to the injected ``CommandHandler`` and
returns its JSON response.
"""

from droid_mcp.tools import input_tools, state_tools, system_tools


def register_all_tools(mcp, handler):
    """Register all tool handlers on *mcp*."""
    input_tools.register(mcp, handler)
    state_tools.register(mcp, handler)
    system_tools.register(mcp, handler)
