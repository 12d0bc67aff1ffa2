"""Accessibility bridge: gestures, text injection and tree inspection.

``AccessibilityBridge`` is the host-side counterpart of an on-device
accessibility service. It is only reachable through a ``ServiceHandle``,
which the command handler receives at construction; an empty handle means
the service is not connected.
"""

import logging
import threading
from typing import Callable

from droid_mcp.a11y.node import NodeAction
from droid_mcp.bridge.gesture import GestureFuture, TapGesture, clamp_tap_duration
from droid_mcp.bridge.ports import ActionDispatcher, TreeSnapshotSource
from droid_mcp.tree.config import DEFAULT_SNAPSHOT_MAX_NODES
from droid_mcp.tree.service import Tree
from droid_mcp.tree.views import UiNodeDump

logger = logging.getLogger(__name__)


class AccessibilityBridge:
    def __init__(self, source: TreeSnapshotSource, dispatcher: ActionDispatcher):
        self.source = source
        self.dispatcher = dispatcher
        self.tree = Tree(source, dispatcher)

    async def tap(self, x: float, y: float, duration_ms: int) -> bool:
        gesture = TapGesture(x=x, y=y, duration_ms=clamp_tap_duration(duration_ms))
        pending = GestureFuture()
        if not self.dispatcher.dispatch_gesture(gesture, pending):
            logger.debug("Gesture at (%s,%s) rejected at dispatch", x, y)
            pending.reject()
        return await pending.wait()

    def set_text(self, text: str, target_query: str | None = None) -> bool:
        node = self.tree.resolve_editable_target(target_query)
        if node is None:
            logger.debug("No editable target for set_text (query=%r)", target_query)
            return False
        return self.dispatcher.perform_action(node, NodeAction.SET_TEXT, text)

    def paste_text(self, text: str, target_query: str | None = None) -> bool:
        setter = self.dispatcher.clipboard_setter()
        if setter is None or not setter(text):
            logger.debug("Clipboard unavailable for paste")
            return False
        node = self.tree.resolve_editable_target(target_query)
        if node is None:
            return False
        if self.dispatcher.perform_action(node, NodeAction.PASTE):
            return True
        # Fields that reject PASTE usually still accept a direct text set
        return self.dispatcher.perform_action(node, NodeAction.SET_TEXT, text)

    def snapshot(self, max_nodes: int = DEFAULT_SNAPSHOT_MAX_NODES) -> list[UiNodeDump]:
        return self.tree.snapshot(self.tree.get_root(), max_nodes)

    def find(self, query: str) -> UiNodeDump | None:
        return self.tree.find_best(self.tree.get_root(), query)

    def exists(self, query: str) -> bool:
        return self.tree.exists(self.tree.get_root(), query)

    def click(self, path: str | None = None, query: str | None = None) -> bool:
        """Click the node at *path*, falling back to the best match for *query*."""
        root = self.tree.get_root()
        if root is None:
            return False
        node = None
        if path:
            node = self.tree.resolve_path(root, path)
            if node is None:
                logger.debug("Path %r did not resolve", path)
        if node is None and query:
            node = self.tree.find_best_node(root, query)
        if node is None:
            return False
        return self.tree.click_node_or_ancestor(node)


class ServiceHandle:
    """Holds the currently connected bridge, if any.

    ``disconnect`` only clears the handle when it still refers to the bridge
    being torn down, so a late disconnect never drops a newer connection.

    Args:
        bridge: Bridge to start connected with.
        is_available: Reports whether the host platform is reachable right
            now. When given, ``refresh`` connects or drops the bridge to
            follow it.
        factory: Builds a bridge when ``refresh`` finds the platform
            available and nothing is connected.
    """

    def __init__(
        self,
        bridge: AccessibilityBridge | None = None,
        is_available: Callable[[], bool] | None = None,
        factory: Callable[[], AccessibilityBridge] | None = None,
    ):
        self._lock = threading.Lock()
        self._bridge = bridge
        self._is_available = is_available
        self._factory = factory

    def connect(self, bridge: AccessibilityBridge) -> None:
        with self._lock:
            self._bridge = bridge
        logger.info("Accessibility bridge connected")

    def disconnect(self, bridge: AccessibilityBridge | None = None) -> bool:
        with self._lock:
            if bridge is not None and self._bridge is not bridge:
                return False
            self._bridge = None
        logger.info("Accessibility bridge disconnected")
        return True

    def get(self) -> AccessibilityBridge | None:
        with self._lock:
            return self._bridge

    def is_active(self) -> bool:
        return self.get() is not None

    def refresh(self) -> AccessibilityBridge | None:
        """Re-check availability and return the bridge to use, if any.

        Blocking: ``is_available`` may shell out to the host platform.
        """
        if self._is_available is None:
            return self.get()
        current = self.get()
        if not self._is_available():
            if current is not None and self.disconnect(current):
                logger.warning("Host platform went away; bridge dropped")
            return None
        if current is not None or self._factory is None:
            return current
        bridge = self._factory()
        with self._lock:
            if self._bridge is not None:
                return self._bridge
            self._bridge = bridge
        logger.info("Accessibility bridge connected")
        return bridge
