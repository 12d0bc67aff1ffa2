from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Center:
    x: int
    y: int

    def to_string(self) -> str:
        return f"({self.x},{self.y})"


@dataclass(frozen=True)
class BoundingBox:
    left: int
    top: int
    right: int
    bottom: int
    width: int
    height: int

    @classmethod
    def from_rect(cls, rect) -> "BoundingBox":
        return cls(
            left=rect.left,
            top=rect.top,
            right=rect.right,
            bottom=rect.bottom,
            width=rect.right - rect.left,
            height=rect.bottom - rect.top,
        )

    def get_center(self) -> Center:
        return Center(x=(self.left + self.right) // 2, y=(self.top + self.bottom) // 2)

    def to_string(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"


@dataclass(frozen=True)
class UiNodeDump:
    """Immutable projection of a node at the moment it was read."""

    path: str
    bounding_box: BoundingBox
    center: Center
    text: str = ""
    description: str = ""
    hint: str = ""
    view_id: str = ""
    clickable: bool = False
    editable: bool = False
    focusable: bool = False
    focused: bool = False
    enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path}
        if self.text:
            data["text"] = self.text
        if self.description:
            data["description"] = self.description
        if self.hint:
            data["hint"] = self.hint
        if self.view_id:
            data["viewId"] = self.view_id
        data["bounds"] = self.bounding_box.to_string()
        data["centerX"] = self.center.x
        data["centerY"] = self.center.y
        data["clickable"] = self.clickable
        data["editable"] = self.editable
        data["focusable"] = self.focusable
        data["focused"] = self.focused
        data["enabled"] = self.enabled
        return data


@dataclass
class ScoredCandidate:
    score: int
    node: Any = field(repr=False)
    path: str
