"""Input / interaction MCP tools.

Registers: Tap, TextInput, ImePaste, Click (4 tools).
"""

from fastmcp import Context
from mcp.types import ToolAnnotations

from droid_mcp.tools._helpers import _drop_none


def register(mcp, handler):
    """Register input/interaction tools on *mcp*."""

    @mcp.tool(
        name="Tap",
        description="Taps the screen at pixel coordinates (x, y). duration_ms holds the press and is clamped to 40-1000 ms (default 60).",
        annotations=ToolAnnotations(
            title="Tap",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def tap_tool(x: float, y: float, duration_ms: int | None = None, ctx: Context = None) -> dict:
        result = await handler.handle("screen.tap", _drop_none(x=x, y=y, durationMs=duration_ms))
        return result.to_dict()

    @mcp.tool(
        name="TextInput",
        description="Replaces the content of the editable field that should receive input: the focused field, else the field best matching target_query (tapping it to reveal an input if needed), else the first editable field on screen.",
        annotations=ToolAnnotations(
            title="TextInput",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def text_input_tool(text: str, target_query: str | None = None, ctx: Context = None) -> dict:
        result = await handler.handle("text.input", _drop_none(text=text, targetQuery=target_query))
        return result.to_dict()

    @mcp.tool(
        name="ImePaste",
        description="Copies text to the device clipboard and pastes it into the editable field chosen the same way as TextInput. Falls back to setting the text when the field rejects paste.",
        annotations=ToolAnnotations(
            title="ImePaste",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def ime_paste_tool(text: str, target_query: str | None = None, ctx: Context = None) -> dict:
        result = await handler.handle("ime.paste", _drop_none(text=text, targetQuery=target_query))
        return result.to_dict()

    @mcp.tool(
        name="Click",
        description="Clicks a UI node by path (as returned by Snapshot/Find, e.g. 'r/0/2') or by free-text query. Non-clickable nodes are clicked through their nearest clickable ancestor.",
        annotations=ToolAnnotations(
            title="Click",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def click_tool(path: str | None = None, query: str | None = None, ctx: Context = None) -> dict:
        result = await handler.handle("ui.click", _drop_none(path=path, query=query))
        return result.to_dict()
