"""App and raw-command MCP tools.

Registers: AppLaunch, Invoke (2 tools).
"""

from typing import Any

from fastmcp import Context
from mcp.types import ToolAnnotations

from droid_mcp.tools._helpers import _drop_none


def register(mcp, handler):
    """Register app/system tools on *mcp*."""

    @mcp.tool(
        name="AppLaunch",
        description="Launches an app by package name, optionally a specific activity ('.MainActivity' or 'pkg/.MainActivity').",
        annotations=ToolAnnotations(
            title="AppLaunch",
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def app_launch_tool(package_name: str, activity: str | None = None, ctx: Context = None) -> dict:
        result = await handler.handle(
            "app.launch", _drop_none(packageName=package_name, activity=activity)
        )
        return result.to_dict()

    @mcp.tool(
        name="Invoke",
        description=(
            "Runs a raw device command with a JSON params object. Commands: "
            + ", ".join(handler.command_names)
            + ". Params use camelCase names, e.g. {\"x\": 540, \"y\": 1800, \"durationMs\": 60} for screen.tap."
        ),
        annotations=ToolAnnotations(
            title="Invoke",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        ),
    )
    async def invoke_tool(
        command: str, params: dict[str, Any] | None = None, ctx: Context = None
    ) -> dict:
        result = await handler.handle(command, params or {})
        return result.to_dict()
