from droid_mcp.commands.errors import CommandError, ErrorCode
from droid_mcp.commands.handler import CommandHandler, CommandResult

__all__ = ["CommandError", "CommandHandler", "CommandResult", "ErrorCode"]
