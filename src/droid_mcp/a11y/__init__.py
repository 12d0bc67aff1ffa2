from droid_mcp.a11y.hierarchy import parse_bounds, parse_hierarchy
from droid_mcp.a11y.node import AccessibilityNode, NodeAction, Rect, UiNode

__all__ = [
    "AccessibilityNode",
    "NodeAction",
    "Rect",
    "UiNode",
    "parse_bounds",
    "parse_hierarchy",
]
