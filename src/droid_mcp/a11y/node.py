"""Accessibility node capability interface.

The tree the core walks is owned by the host platform. Everything in
``droid_mcp.tree`` talks to nodes only through ``AccessibilityNode`` so a
uiautomator hierarchy, a live device binding or a test fixture can be
substituted for one another.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, runtime_checkable


@dataclass(frozen=True)
class Rect:
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    def width(self) -> int:
        return self.right - self.left

    def height(self) -> int:
        return self.bottom - self.top


class NodeAction(Enum):
    CLICK = "click"
    FOCUS = "focus"
    SET_TEXT = "set_text"
    PASTE = "paste"

    def __str__(self):
        return self.value


@runtime_checkable
class AccessibilityNode(Protocol):
    """Read-only view of one element in the host accessibility tree."""

    text: str
    content_description: str
    hint: str
    view_id: str
    bounds: Rect
    clickable: bool
    editable: bool
    focusable: bool
    focused: bool
    enabled: bool

    @property
    def child_count(self) -> int: ...

    def get_child(self, index: int) -> AccessibilityNode | None: ...

    @property
    def parent(self) -> AccessibilityNode | None: ...


class UiNode:
    """In-memory accessibility node.

    Used for parsed uiautomator hierarchies and for fixture trees in tests.
    The parent link is a weak reference so a node never keeps its tree alive.
    """

    def __init__(
        self,
        text: str = "",
        content_description: str = "",
        hint: str = "",
        view_id: str = "",
        bounds: Rect | None = None,
        clickable: bool = False,
        editable: bool = False,
        focusable: bool = False,
        focused: bool = False,
        enabled: bool = True,
        class_name: str = "",
        children: Iterable[UiNode | None] = (),
    ):
        self.text = text or ""
        self.content_description = content_description or ""
        self.hint = hint or ""
        self.view_id = view_id or ""
        self.bounds = bounds or Rect()
        self.clickable = clickable
        self.editable = editable
        self.focusable = focusable
        self.focused = focused
        self.enabled = enabled
        self.class_name = class_name or ""
        self._parent_ref: weakref.ReferenceType[UiNode] | None = None
        self._children: list[UiNode | None] = []
        for child in children:
            self.add_child(child)

    def add_child(self, child: UiNode | None) -> UiNode | None:
        # None placeholders model children the host reports but cannot hand out
        if child is not None:
            child._parent_ref = weakref.ref(self)
        self._children.append(child)
        return child

    @property
    def child_count(self) -> int:
        return len(self._children)

    def get_child(self, index: int) -> UiNode | None:
        if index < 0 or index >= len(self._children):
            return None
        return self._children[index]

    @property
    def parent(self) -> UiNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def __repr__(self) -> str:
        label = self.text or self.content_description or self.view_id or self.class_name
        return f"UiNode({label!r}, children={len(self._children)})"
