from droid_mcp.bridge.gesture import GestureFuture, TapGesture, clamp_tap_duration
from droid_mcp.bridge.service import AccessibilityBridge, ServiceHandle

__all__ = [
    "AccessibilityBridge",
    "GestureFuture",
    "ServiceHandle",
    "TapGesture",
    "clamp_tap_duration",
]
