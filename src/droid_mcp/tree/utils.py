from droid_mcp.a11y.node import AccessibilityNode
from droid_mcp.tree.config import (
    CLICKABLE_BONUS,
    DESCRIPTION_MATCH_SCORE,
    EDITABLE_BONUS,
    ENABLED_BONUS,
    HINT_MATCH_SCORE,
    PATH_SEPARATOR,
    ROOT_PATH,
    TEXT_MATCH_SCORE,
    VIEW_ID_MATCH_SCORE,
)
from droid_mcp.tree.views import BoundingBox, UiNodeDump


def normalize_query(query: str | None) -> str:
    """Trim and lowercase a free-text query. Returns "" for None."""
    if query is None:
        return ""
    return str(query).strip().lower()


def _contains(value: str | None, normalized_query: str) -> bool:
    if not value:
        return False
    candidate = value.strip()
    if not candidate:
        return False
    return normalized_query in candidate.lower()


def score_node(node: AccessibilityNode, normalized_query: str) -> int:
    """Score how well a node matches an already-normalized, non-empty query.

    Textual weights are additive and strictly ordered (text > description >
    hint > view id). Actionability bonuses only break ties between nodes
    that matched textually, so a node with no textual match always scores 0.

    Args:
        node: The node to score.
        normalized_query: Query trimmed and lowercased by the caller.

    Returns:
        A non-negative score; 0 means the node did not match.
    """
    score = 0
    if _contains(node.text, normalized_query):
        score += TEXT_MATCH_SCORE
    if _contains(node.content_description, normalized_query):
        score += DESCRIPTION_MATCH_SCORE
    if _contains(node.hint, normalized_query):
        score += HINT_MATCH_SCORE
    if _contains(node.view_id, normalized_query):
        score += VIEW_ID_MATCH_SCORE
    if score == 0:
        return 0
    if node.editable:
        score += EDITABLE_BONUS
    if node.clickable:
        score += CLICKABLE_BONUS
    if node.enabled:
        score += ENABLED_BONUS
    return score


def child_path(parent_path: str, index: int) -> str:
    return f"{parent_path}{PATH_SEPARATOR}{index}"


def encode_path(indices: list[int] | tuple[int, ...]) -> str:
    path = ROOT_PATH
    for index in indices:
        path = child_path(path, index)
    return path


def decode_path(path: str | None) -> list[int] | None:
    """Decode ``"r/0/2"`` into ``[0, 2]``.

    An empty or root-only path decodes to ``[]``. Returns None when the
    path does not start with ``"r/"`` or any segment is not a non-negative
    integer.
    """
    remaining = (path or "").strip()
    if remaining in ("", ROOT_PATH):
        return []
    prefix = ROOT_PATH + PATH_SEPARATOR
    if not remaining.startswith(prefix):
        return None
    indices = []
    for segment in remaining[len(prefix) :].split(PATH_SEPARATOR):
        if not (segment.isascii() and segment.isdigit()):
            return None
        indices.append(int(segment))
    return indices


def dump_node(node: AccessibilityNode, path: str) -> UiNodeDump:
    bounding_box = BoundingBox.from_rect(node.bounds)
    return UiNodeDump(
        path=path,
        bounding_box=bounding_box,
        center=bounding_box.get_center(),
        text=(node.text or "").strip(),
        description=(node.content_description or "").strip(),
        hint=(node.hint or "").strip(),
        view_id=(node.view_id or "").strip(),
        clickable=bool(node.clickable),
        editable=bool(node.editable),
        focusable=bool(node.focusable),
        focused=bool(node.focused),
        enabled=bool(node.enabled),
    )
