import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from enum import Enum
from textwrap import dedent

import click
from dotenv import load_dotenv
from fastmcp import FastMCP

from droid_mcp.adb import AdbActionDispatcher, AdbAppLauncher, AdbClient, AdbTreeSource
from droid_mcp.auth import AuthKeyManager, BearerAuthMiddleware
from droid_mcp.bridge import AccessibilityBridge, ServiceHandle
from droid_mcp.commands import CommandHandler
from droid_mcp.config import Settings
from droid_mcp.tools import register_all_tools

load_dotenv()

logger = logging.getLogger("droid_mcp")

settings = Settings.from_env()
adb = AdbClient(
    adb_path=settings.adb_path,
    device_id=settings.device_id or None,
    timeout=settings.adb_timeout,
)


def _device_available() -> bool:
    return adb.is_connected()


def _make_bridge() -> AccessibilityBridge:
    return AccessibilityBridge(AdbTreeSource(adb), AdbActionDispatcher(adb))


# Re-checked on every command, so a device attached or unplugged after startup is followed
service = ServiceHandle(is_available=_device_available, factory=_make_bridge)
handler = CommandHandler(service, launcher=AdbAppLauncher(adb))


instructions = dedent("""
Droid MCP server controls an attached Android device: it taps the screen,
types or pastes text into fields, launches apps and inspects the UI tree of
the foreground app. Nodes are addressed by path ('r/0/2') or free-text query.
""")


@asynccontextmanager
async def lifespan(app: FastMCP):
    """Attach the ADB-backed bridge if a device is present, and drop it on shutdown."""
    if await asyncio.to_thread(service.refresh) is None:
        logger.warning(
            "No adb device available%s; UI commands report ACCESSIBILITY_DISABLED until one is attached",
            f" matching {settings.device_id}" if settings.device_id else "",
        )
    try:
        yield
    finally:
        service.disconnect()


mcp = FastMCP(name="droid-mcp", instructions=instructions, lifespan=lifespan)
register_all_tools(mcp, handler)


class Transport(Enum):
    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"

    def __str__(self):
        return self.value


@click.command()
@click.option(
    "--transport",
    help="The transport layer used by the MCP server.",
    type=click.Choice(
        [Transport.STDIO.value, Transport.SSE.value, Transport.STREAMABLE_HTTP.value]
    ),
    default="stdio",
)
@click.option(
    "--host",
    help="Host to bind the SSE/Streamable HTTP server.",
    default="localhost",
    type=str,
    show_default=True,
)
@click.option(
    "--port",
    help="Port to bind the SSE/Streamable HTTP server.",
    default=8000,
    type=int,
    show_default=True,
)
@click.option(
    "--api-key",
    help="API key for authenticating HTTP/SSE clients. Defaults to DROID_MCP_API_KEY, then the stored key.",
    default=None,
    type=str,
)
@click.option(
    "--generate-key",
    help="Generate a new API key, store it in the user config directory, and exit.",
    is_flag=True,
    default=False,
)
@click.option(
    "--rotate-key",
    help="Rotate the stored API key and exit.",
    is_flag=True,
    default=False,
)
def main(transport, host, port, api_key, generate_key, rotate_key):
    if generate_key:
        key = AuthKeyManager.generate_key()
        click.echo(f"API key generated.\nKey: {key}")
        click.echo("Use: droid-mcp --transport sse --api-key <key>")
        sys.exit(0)

    if rotate_key:
        key = AuthKeyManager.rotate_key()
        click.echo(f"API key rotated.\nNew key: {key}")
        click.echo("Update your client configurations with the new key.")
        sys.exit(0)

    match transport:
        case Transport.STDIO.value:
            mcp.run(transport=Transport.STDIO.value, show_banner=False)
        case Transport.SSE.value | Transport.STREAMABLE_HTTP.value:
            resolved_key = api_key or settings.api_key or AuthKeyManager.load_key()
            if resolved_key:
                mcp.add_middleware(BearerAuthMiddleware(resolved_key))
                logger.info("Bearer token authentication enabled for %s transport", transport)
            else:
                if host not in ("localhost", "127.0.0.1"):
                    logger.warning(
                        "No API key configured. Refusing to bind to %s. "
                        "Use --api-key or --generate-key, or bind to localhost.",
                        host,
                    )
                    click.echo(
                        f"Error: Cannot bind to {host} without authentication.\n"
                        "Run 'droid-mcp --generate-key' first, or use --host localhost.",
                        err=True,
                    )
                    sys.exit(1)
                logger.warning("No API key configured. Server accessible without authentication.")
            mcp.run(transport=transport, host=host, port=port, show_banner=False)
        case _:
            raise ValueError(f"Invalid transport: {transport}")


if __name__ == "__main__":
    main()
