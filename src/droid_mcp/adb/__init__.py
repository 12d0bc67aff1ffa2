from droid_mcp.adb.backend import AdbActionDispatcher, AdbAppLauncher, AdbTreeSource
from droid_mcp.adb.client import AdbClient, AdbError

__all__ = [
    "AdbActionDispatcher",
    "AdbAppLauncher",
    "AdbClient",
    "AdbError",
    "AdbTreeSource",
]
