"""Build ``UiNode`` trees from ``uiautomator dump`` XML.

Input format::

    <hierarchy rotation="0">
        <node index="0" text="" resource-id="" class="android.widget.FrameLayout"
              content-desc="" hint="" clickable="false" enabled="true"
              focusable="false" focused="false" bounds="[0,0][1080,2400]">
            <node ...>...</node>
        </node>
    </hierarchy>
"""

import logging
import re
import xml.etree.ElementTree as ET

from droid_mcp.a11y.node import Rect, UiNode

logger = logging.getLogger(__name__)

BOUNDS_PATTERN = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")

# uiautomator does not export isEditable; these widget classes accept text input
EDITABLE_CLASS_SUFFIXES = (
    "EditText",
    "AutoCompleteTextView",
    "MultiAutoCompleteTextView",
    "SearchView$SearchAutoComplete",
    "ExtractEditText",
)


def parse_bounds(bounds: str) -> Rect | None:
    match = BOUNDS_PATTERN.search(bounds or "")
    if not match:
        return None
    left, top, right, bottom = (int(group) for group in match.groups())
    return Rect(left=left, top=top, right=right, bottom=bottom)


def extract_hierarchy(xml_text: str) -> str | None:
    """Cut the ``<hierarchy>`` element out of noisy dump output."""
    if not xml_text:
        return None
    xml_text = xml_text.replace("\x00", "")
    match = re.search(r"<hierarchy[^>]*>.*</hierarchy>", xml_text, re.DOTALL)
    if not match:
        return None
    return match.group(0).strip()


def _flag(element: ET.Element, name: str, default: bool = False) -> bool:
    value = element.attrib.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _is_editable(element: ET.Element) -> bool:
    if "editable" in element.attrib:
        return _flag(element, "editable")
    class_name = element.attrib.get("class", "")
    return class_name.endswith(EDITABLE_CLASS_SUFFIXES)


def _build_node(element: ET.Element) -> UiNode:
    node = UiNode(
        text=element.attrib.get("text", ""),
        content_description=element.attrib.get("content-desc", ""),
        hint=element.attrib.get("hint", ""),
        view_id=element.attrib.get("resource-id", ""),
        bounds=parse_bounds(element.attrib.get("bounds", "")) or Rect(),
        clickable=_flag(element, "clickable"),
        editable=_is_editable(element),
        focusable=_flag(element, "focusable"),
        focused=_flag(element, "focused"),
        enabled=_flag(element, "enabled", default=True),
        class_name=element.attrib.get("class", ""),
    )
    for child in element:
        if child.tag == "node":
            node.add_child(_build_node(child))
    return node


def parse_hierarchy(xml_text: str) -> UiNode | None:
    """Parse a uiautomator dump into a node tree.

    Returns None when the dump is empty or malformed. A hierarchy with
    several top-level windows is wrapped in a synthetic root spanning all
    of them so that every window stays addressable by path.
    """
    extracted = extract_hierarchy(xml_text)
    if not extracted:
        logger.debug("No <hierarchy> element found in dump output")
        return None
    try:
        root = ET.fromstring(extracted)
    except ET.ParseError as e:
        logger.warning("Failed to parse uiautomator XML: %s", e)
        return None

    top_level = [_build_node(child) for child in root if child.tag == "node"]
    if not top_level:
        return None
    if len(top_level) == 1:
        return top_level[0]

    bounds = Rect(
        left=min(n.bounds.left for n in top_level),
        top=min(n.bounds.top for n in top_level),
        right=max(n.bounds.right for n in top_level),
        bottom=max(n.bounds.bottom for n in top_level),
    )
    return UiNode(class_name="hierarchy", bounds=bounds, children=top_level)
