"""Observation MCP tools.

Registers: Snapshot, Find, WaitFor (3 tools).
"""

from fastmcp import Context
from mcp.types import ToolAnnotations

from droid_mcp.tools._helpers import _drop_none


def register(mcp, handler):
    """Register observation tools on *mcp*."""

    @mcp.tool(
        name="Snapshot",
        description="Lists UI nodes of the foreground app in breadth-first order, up to max_nodes (default 300). Each node carries its path, text, description, hint, viewId, bounds, center and clickable/editable/focusable/focused/enabled flags. Call this first to understand the screen.",
        annotations=ToolAnnotations(
            title="Snapshot",
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        ),
    )
    async def snapshot_tool(max_nodes: int | None = None, ctx: Context = None) -> dict:
        result = await handler.handle("ui.snapshot", _drop_none(maxNodes=max_nodes))
        return result.to_dict()

    @mcp.tool(
        name="Find",
        description="Finds the UI node that best matches a free-text query. Text matches outrank content descriptions, hints and view ids; editable and clickable nodes win ties.",
        annotations=ToolAnnotations(
            title="Find",
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        ),
    )
    async def find_tool(query: str, ctx: Context = None) -> dict:
        result = await handler.handle("ui.find", {"query": query})
        return result.to_dict()

    @mcp.tool(
        name="WaitFor",
        description=(
            "Polls until a node matching query appears (or disappears when expect_gone=True). "
            "timeout_ms is clamped to 100-15000 (default 3000), poll_ms to 50-1000 (default 150)."
        ),
        annotations=ToolAnnotations(
            title="WaitFor",
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        ),
    )
    async def wait_for_tool(
        query: str,
        timeout_ms: int | None = None,
        poll_ms: int | None = None,
        expect_gone: bool | str = False,
        ctx: Context = None,
    ) -> dict:
        result = await handler.handle(
            "ui.waitFor",
            _drop_none(query=query, timeoutMs=timeout_ms, pollMs=poll_ms, expectGone=expect_gone),
        )
        return result.to_dict()
