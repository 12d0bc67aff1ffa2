import logging
from collections import deque
from typing import TYPE_CHECKING, Iterator

from droid_mcp.a11y.node import AccessibilityNode, NodeAction
from droid_mcp.tree.config import DEFAULT_SNAPSHOT_MAX_NODES, ROOT_PATH
from droid_mcp.tree.utils import (
    child_path,
    decode_path,
    dump_node,
    normalize_query,
    score_node,
)
from droid_mcp.tree.views import ScoredCandidate, UiNodeDump

if TYPE_CHECKING:
    from droid_mcp.bridge.ports import ActionDispatcher, TreeSnapshotSource

logger = logging.getLogger(__name__)


def _safe_child(node: AccessibilityNode, index: int) -> AccessibilityNode | None:
    try:
        return node.get_child(index)
    except Exception:
        logger.debug("Child %d unavailable, skipping", index, exc_info=True)
        return None


def _safe_child_count(node: AccessibilityNode) -> int:
    try:
        return node.child_count
    except Exception:
        logger.debug("Child count unavailable, treating node as a leaf", exc_info=True)
        return 0


def iter_breadth_first(root: AccessibilityNode | None) -> Iterator[tuple[AccessibilityNode, str]]:
    """Yield ``(node, path)`` pairs in level order starting at *root*."""
    if root is None:
        return
    queue: deque[tuple[AccessibilityNode, str]] = deque([(root, ROOT_PATH)])
    while queue:
        node, path = queue.popleft()
        yield node, path
        for index in range(_safe_child_count(node)):
            child = _safe_child(node, index)
            if child is None:
                continue
            queue.append((child, child_path(path, index)))


def iter_depth_first(root: AccessibilityNode | None) -> Iterator[AccessibilityNode]:
    """Yield nodes in pre-order: a node before any of its children."""
    if root is None:
        return
    stack: list[AccessibilityNode] = [root]
    while stack:
        node = stack.pop()
        yield node
        children = []
        for index in range(_safe_child_count(node)):
            child = _safe_child(node, index)
            if child is not None:
                children.append(child)
        # Reversed so the leftmost child is visited first
        stack.extend(reversed(children))


class Tree:
    """Walks, scores and resolves nodes of the live accessibility tree.

    The walker methods take the root explicitly and never hold on to nodes
    past the call. ``resolve_editable_target`` needs the snapshot source to
    re-read the tree after a click and the dispatcher to focus and click.
    """

    def __init__(self, source: "TreeSnapshotSource", dispatcher: "ActionDispatcher"):
        self.source = source
        self.dispatcher = dispatcher

    def get_root(self) -> AccessibilityNode | None:
        try:
            return self.source.get_root()
        except Exception as e:
            logger.debug("Tree root unavailable: %s", e)
            return None

    # -----------------------------------------------------------------------
    # Walking
    # -----------------------------------------------------------------------

    def snapshot(
        self, root: AccessibilityNode | None, max_nodes: int = DEFAULT_SNAPSHOT_MAX_NODES
    ) -> list[UiNodeDump]:
        limit = max(1, max_nodes)
        nodes: list[UiNodeDump] = []
        for node, path in iter_breadth_first(root):
            nodes.append(dump_node(node, path))
            if len(nodes) >= limit:
                break
        return nodes

    def _best_candidate(
        self, root: AccessibilityNode | None, query: str
    ) -> ScoredCandidate | None:
        normalized = normalize_query(query)
        if not normalized:
            return None
        best: ScoredCandidate | None = None
        # Full walk: a deeper node may outscore a shallow one
        for node, path in iter_breadth_first(root):
            score = score_node(node, normalized)
            if score <= 0:
                continue
            if best is None or score > best.score:
                best = ScoredCandidate(score=score, node=node, path=path)
        if best is not None:
            logger.debug("Best match for %r: %s (score %d)", normalized, best.path, best.score)
        return best

    def find_best(self, root: AccessibilityNode | None, query: str) -> UiNodeDump | None:
        candidate = self._best_candidate(root, query)
        if candidate is None:
            return None
        return dump_node(candidate.node, candidate.path)

    def find_best_node(
        self, root: AccessibilityNode | None, query: str
    ) -> AccessibilityNode | None:
        candidate = self._best_candidate(root, query)
        return candidate.node if candidate else None

    def find_first_match(
        self, root: AccessibilityNode | None, query: str
    ) -> AccessibilityNode | None:
        """Return the first node in level order that scores above zero."""
        normalized = normalize_query(query)
        if not normalized:
            return None
        for node, _ in iter_breadth_first(root):
            if score_node(node, normalized) > 0:
                return node
        return None

    def exists(self, root: AccessibilityNode | None, query: str) -> bool:
        return self.find_first_match(root, query) is not None

    def resolve_path(
        self, root: AccessibilityNode | None, path: str | None
    ) -> AccessibilityNode | None:
        if root is None:
            return None
        indices = decode_path(path)
        if indices is None:
            logger.debug("Malformed node path %r", path)
            return None
        node = root
        for index in indices:
            if index >= _safe_child_count(node):
                return None
            node = _safe_child(node, index)
            if node is None:
                return None
        return node

    # -----------------------------------------------------------------------
    # Editable target resolution
    # -----------------------------------------------------------------------

    @staticmethod
    def find_focused_editable(root: AccessibilityNode | None) -> AccessibilityNode | None:
        for node in iter_depth_first(root):
            if node.focused and node.editable:
                return node
        return None

    @staticmethod
    def find_first_editable(root: AccessibilityNode | None) -> AccessibilityNode | None:
        for node in iter_depth_first(root):
            if node.editable:
                return node
        return None

    def click_node_or_ancestor(self, node: AccessibilityNode | None) -> bool:
        """Click *node*, or walk upward until a clickable ancestor accepts."""
        current = node
        while current is not None:
            if current.clickable and self.dispatcher.perform_action(current, NodeAction.CLICK):
                return True
            current = current.parent
        return False

    def resolve_editable_target(self, query: str | None = None) -> AccessibilityNode | None:
        """Pick the node that should receive text input or a paste.

        Order: the focused editable node, then the first node matching
        *query* (focused and clicked if editable, otherwise clicked to reveal
        an input), then the first editable node anywhere in the tree.
        Returns None when nothing editable can be found.
        """
        root = self.get_root()
        if root is None:
            return None

        focused = self.find_focused_editable(root)
        if focused is not None:
            return focused

        if normalize_query(query):
            match = self.find_first_match(root, query)
            if match is not None:
                if match.editable:
                    self.dispatcher.perform_action(match, NodeAction.FOCUS)
                    self.dispatcher.perform_action(match, NodeAction.CLICK)
                    return match

                if self.click_node_or_ancestor(match):
                    refreshed = self.get_root()
                    if refreshed is not None:
                        root = refreshed
                        focused = self.find_focused_editable(root)
                        if focused is not None:
                            logger.debug("Input revealed by clicking match for %r", query)
                            return focused

                descendant = self.find_first_editable(match)
                if descendant is not None:
                    return descendant
            logger.debug("Query %r did not yield an editable target, scanning tree", query)

        return self.find_first_editable(root)
