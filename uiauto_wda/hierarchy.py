# uiauto_wda/hierarchy.py
"""
@file hierarchy.py
@brief In-memory UI hierarchy parsed from a page source snapshot.

The page source is the XML document served by the automation server:

    <AppiumAUT>
      <XCUIElementTypeButton type="XCUIElementTypeButton" name="loginBtn"
          label="Login" enabled="true" visible="true"
          x="50" y="100" width="290" height="50">
        ...
      </XCUIElementTypeButton>
    </AppiumAUT>

Nodes live in an arena (Snapshot) and refer to their parent by arena
index, so upward walks never hold references back into the tree.
"""

from __future__ import annotations
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .exceptions import ParseError


ROOT_WRAPPER_TAG = "AppiumAUT"


@dataclass(frozen=True)
class Bounds:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def center(self) -> Tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    def contains_point(self, x: int, y: int) -> bool:
        """Half-open containment: the right and bottom edges are outside."""
        return self.x <= x < self.right and self.y <= y < self.bottom

    def contains(self, other: Bounds) -> bool:
        """True if other lies fully inside these bounds (edges inclusive)."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def center_inside(self, other: Bounds) -> bool:
        cx, cy = self.center()
        return other.contains_point(cx, cy)


@dataclass(eq=False)
class Node:
    type: str = ""
    name: str = ""
    label: str = ""
    value: str = ""
    placeholder: str = ""
    bounds: Bounds = field(default_factory=Bounds)
    enabled: bool = True
    displayed: bool = True
    selected: bool = False
    focused: bool = False
    children: List[Node] = field(default_factory=list, repr=False)
    node_id: int = -1
    parent_id: Optional[int] = None
    depth: int = 0

    def texts(self) -> Tuple[str, str, str, str]:
        """Text-bearing attributes in matching order."""
        return self.label, self.name, self.value, self.placeholder


class Snapshot(Sequence[Node]):
    """
    Flat, depth-tagged view of one page source, in pre-order.

    Built once per resolution attempt and never mutated afterwards.
    """

    def __init__(self, roots: List[Node]):
        nodes: List[Node] = []
        for root in roots:
            _flatten(root, 0, None, nodes)
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self.roots: Tuple[Node, ...] = tuple(roots)

    def __getitem__(self, index):
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    def parent_of(self, node: Node) -> Optional[Node]:
        if node.parent_id is None:
            return None
        return self._nodes[node.parent_id]

    def ancestors(self, node: Node) -> Iterator[Node]:
        """Yield parent, grandparent, ... up to the root."""
        parent = self.parent_of(node)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)


def _flatten(node: Node, depth: int, parent_id: Optional[int], out: List[Node]) -> None:
    node.depth = depth
    node.parent_id = parent_id
    node.node_id = len(out)
    out.append(node)
    for child in node.children:
        _flatten(child, depth + 1, node.node_id, out)


def _to_int(raw: Optional[str]) -> int:
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        return 0


def _node_from_element(tag: str, attrs: Dict[str, str]) -> Node:
    return Node(
        type=attrs.get("type", tag),
        name=attrs.get("name", ""),
        label=attrs.get("label", ""),
        value=attrs.get("value", ""),
        placeholder=attrs.get("placeholderValue", ""),
        bounds=Bounds(
            x=_to_int(attrs.get("x")),
            y=_to_int(attrs.get("y")),
            width=_to_int(attrs.get("width")),
            height=_to_int(attrs.get("height")),
        ),
        enabled=attrs.get("enabled", "true") == "true",
        displayed=attrs.get("visible", "true") == "true",
        selected=attrs.get("selected") == "true",
        focused=attrs.get("focused") == "true",
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_page_source(xml_data: str) -> Snapshot:
    """
    Parse page source XML into a Snapshot.

    Parsing is best effort: elements opened before a syntax error are
    kept. Raises ParseError when nothing could be recovered.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    roots: List[Node] = []
    stack: List[Optional[Node]] = []
    parse_error: Optional[ET.ParseError] = None

    def drain() -> None:
        for event, elem in parser.read_events():
            tag = _local_name(elem.tag)
            if event == "start":
                if tag == ROOT_WRAPPER_TAG:
                    stack.append(None)
                    continue
                node = _node_from_element(tag, elem.attrib)
                parent = next((n for n in reversed(stack) if n is not None), None)
                if parent is None:
                    roots.append(node)
                else:
                    parent.children.append(node)
                stack.append(node)
            else:
                stack.pop()
                elem.clear()

    try:
        parser.feed(xml_data or "")
        drain()
        parser.close()
        drain()
    except ET.ParseError as e:
        parse_error = e
        try:
            drain()
        except ET.ParseError:
            pass

    if not roots:
        if parse_error is not None:
            raise ParseError(f"failed to parse page source: {parse_error}") from parse_error
        raise ParseError("no elements found in page source")

    return Snapshot(roots)
