"""ADB implementations of the snapshot source, dispatcher and app launcher.

Nodes come from a parsed ``uiautomator dump``; actions on a node are
delivered as input events at the node's center.
"""

import logging
import threading
from typing import Callable

from droid_mcp.a11y.hierarchy import parse_hierarchy
from droid_mcp.a11y.node import AccessibilityNode, NodeAction
from droid_mcp.adb.client import (
    KEYCODE_DEL,
    KEYCODE_MOVE_END,
    KEYCODE_PASTE,
    AdbClient,
    AdbError,
)
from droid_mcp.bridge.gesture import GestureResultCallback, TapGesture

logger = logging.getLogger(__name__)


def _center(node: AccessibilityNode) -> tuple[int, int]:
    box = node.bounds
    return (box.left + box.right) // 2, (box.top + box.bottom) // 2


class AdbTreeSource:
    def __init__(self, client: AdbClient):
        self.client = client

    def get_root(self) -> AccessibilityNode | None:
        try:
            xml_text = self.client.dump_ui()
        except AdbError as e:
            logger.debug("UI dump unavailable: %s", e)
            return None
        return parse_hierarchy(xml_text)


class AdbActionDispatcher:
    def __init__(self, client: AdbClient):
        self.client = client

    def dispatch_gesture(self, gesture: TapGesture, callback: GestureResultCallback) -> bool:
        def _run():
            try:
                # A zero-length swipe is a press held for duration_ms
                self.client.swipe(
                    gesture.x, gesture.y, gesture.x, gesture.y, gesture.duration_ms
                )
            except AdbError as e:
                logger.warning("Tap gesture at (%s,%s) failed: %s", gesture.x, gesture.y, e)
                callback.on_cancelled()
                return
            callback.on_completed()

        worker = threading.Thread(target=_run, name="adb-gesture", daemon=True)
        try:
            worker.start()
        except RuntimeError:
            logger.error("Unable to start gesture worker", exc_info=True)
            return False
        return True

    def perform_action(
        self, node: AccessibilityNode, action: NodeAction, text: str | None = None
    ) -> bool:
        if not node.enabled:
            return False
        x, y = _center(node)
        try:
            match action:
                case NodeAction.CLICK:
                    self.client.tap(x, y)
                case NodeAction.FOCUS:
                    # The following CLICK focuses it; two taps would select a word
                    if node.editable:
                        return True
                    if not node.focusable:
                        return False
                    self.client.tap(x, y)
                case NodeAction.SET_TEXT:
                    if not node.editable:
                        return False
                    self._replace_text(node, x, y, text or "")
                case NodeAction.PASTE:
                    if not node.editable:
                        return False
                    self.client.tap(x, y)
                    self.client.keyevent(KEYCODE_PASTE)
                case _:
                    return False
        except AdbError as e:
            logger.warning("Action %s at (%d,%d) failed: %s", action, x, y, e)
            return False
        return True

    def _replace_text(self, node: AccessibilityNode, x: int, y: int, text: str) -> None:
        self.client.tap(x, y)
        existing = len(node.text or "")
        if existing:
            self.client.keyevent(KEYCODE_MOVE_END, *([KEYCODE_DEL] * existing))
        if text.isascii():
            self.client.input_text(text)
            return
        # input text only handles ASCII; route anything else through the clipboard
        self.client.set_clipboard(text)
        self.client.keyevent(KEYCODE_PASTE)

    def clipboard_setter(self) -> Callable[[str], bool] | None:
        def _set(text: str) -> bool:
            try:
                self.client.set_clipboard(text)
            except AdbError as e:
                logger.warning("Clipboard write failed: %s", e)
                return False
            return True

        return _set


class AdbAppLauncher:
    def __init__(self, client: AdbClient):
        self.client = client

    def resolve_launch_component(self, package_name: str) -> str | None:
        return self.client.resolve_launch_activity(package_name)

    def start_activity(self, package_name: str, activity: str) -> None:
        component = activity if "/" in activity else f"{package_name}/{activity}"
        logger.info("Starting %s", component)
        self.client.start_activity(component)
