# uiauto_wda/clickable.py
"""
@file clickable.py
@brief Interactive element taxonomy and clickable-ancestor promotion.

The page source carries no "clickable" attribute, so interactivity is
derived from the element type.
"""

from __future__ import annotations
from typing import Iterable, List, Optional

from .hierarchy import Node, Snapshot


CLICKABLE_TYPES = frozenset({
    "XCUIElementTypeButton",
    "XCUIElementTypeLink",
    "XCUIElementTypeTextField",
    "XCUIElementTypeSecureTextField",
    "XCUIElementTypeSearchField",
    "XCUIElementTypeSwitch",
    "XCUIElementTypeSlider",
    "XCUIElementTypeStepper",
    "XCUIElementTypeSegmentedControl",
    "XCUIElementTypeCell",
    "XCUIElementTypeTab",
    "XCUIElementTypeTabBar",
    "XCUIElementTypeMenu",
    "XCUIElementTypeMenuItem",
    "XCUIElementTypePickerWheel",
    "XCUIElementTypeDatePicker",
    "XCUIElementTypeToggle",
    "XCUIElementTypePageIndicator",
})


def is_clickable_type(elem_type: str) -> bool:
    return elem_type in CLICKABLE_TYPES


def sort_clickable_first(nodes: Iterable[Node]) -> List[Node]:
    """Stable partition: interactive nodes first, relative order kept in both groups."""
    clickable: List[Node] = []
    rest: List[Node] = []
    for node in nodes:
        (clickable if is_clickable_type(node.type) else rest).append(node)
    return clickable + rest


def get_clickable_element(node: Optional[Node], snapshot: Snapshot) -> Optional[Node]:
    """
    Return the node to tap: the node itself if interactive, else its
    nearest interactive ancestor, else the node unchanged.

    Covers static labels whose container cell or button takes the tap.
    """
    if node is None:
        return None
    if is_clickable_type(node.type):
        return node
    for ancestor in snapshot.ancestors(node):
        if is_clickable_type(ancestor.type):
            return ancestor
    return node
