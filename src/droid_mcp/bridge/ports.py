from typing import Callable, Optional, Protocol

from droid_mcp.a11y.node import AccessibilityNode, NodeAction
from droid_mcp.bridge.gesture import GestureResultCallback, TapGesture


class TreeSnapshotSource(Protocol):
    def get_root(self) -> Optional[AccessibilityNode]:
        ...


class ActionDispatcher(Protocol):
    def dispatch_gesture(self, gesture: TapGesture, callback: GestureResultCallback) -> bool:
        ...

    def perform_action(
        self, node: AccessibilityNode, action: NodeAction, text: Optional[str] = None
    ) -> bool:
        ...

    def clipboard_setter(self) -> Optional[Callable[[str], bool]]:
        ...


class AppLauncher(Protocol):
    def resolve_launch_component(self, package_name: str) -> Optional[str]:
        ...

    def start_activity(self, package_name: str, activity: str) -> None:
        ...
