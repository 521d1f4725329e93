# uiauto_wda/spatial.py
"""
@file spatial.py
@brief Geometric relation filters against an anchor node, and descendant containment.

Directional filters return candidates ordered by their gap to the anchor,
closest first. Ties keep snapshot order.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Sequence

from .hierarchy import Node
from .matcher import matches_selector
from .selector import RelativeKind, Selector


def filter_below(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    ref = anchor.bounds.bottom
    result = [n for n in candidates if n.bounds.y >= ref]
    return sorted(result, key=lambda n: n.bounds.y - ref)


def filter_above(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    ref = anchor.bounds.y
    result = [n for n in candidates if n.bounds.bottom <= ref]
    return sorted(result, key=lambda n: ref - n.bounds.bottom)


def filter_left_of(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    ref = anchor.bounds.x
    result = [n for n in candidates if n.bounds.right <= ref]
    return sorted(result, key=lambda n: ref - n.bounds.right)


def filter_right_of(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    ref = anchor.bounds.right
    result = [n for n in candidates if n.bounds.x >= ref]
    return sorted(result, key=lambda n: n.bounds.x - ref)


def filter_child_of(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    return [n for n in candidates if anchor.bounds.contains(n.bounds)]


def filter_contains_child(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    return [n for n in candidates if n.bounds.contains(anchor.bounds)]


def filter_inside_of(candidates: Iterable[Node], anchor: Node) -> List[Node]:
    """Center-point containment; weaker than filter_child_of so partial overlaps still pass."""
    return [n for n in candidates if n.bounds.center_inside(anchor.bounds)]


RELATIVE_FILTERS: Dict[RelativeKind, Callable[[Iterable[Node], Node], List[Node]]] = {
    RelativeKind.BELOW: filter_below,
    RelativeKind.ABOVE: filter_above,
    RelativeKind.LEFT_OF: filter_left_of,
    RelativeKind.RIGHT_OF: filter_right_of,
    RelativeKind.CHILD_OF: filter_child_of,
    RelativeKind.CONTAINS_CHILD: filter_contains_child,
    RelativeKind.INSIDE_OF: filter_inside_of,
}


def apply_relative_filter(candidates: Iterable[Node], anchor: Node, kind: RelativeKind) -> List[Node]:
    return RELATIVE_FILTERS[kind](candidates, anchor)


def contains_all_descendants(parent: Node, universe: Iterable[Node], descendants: Sequence[Selector]) -> bool:
    """
    True if every selector in descendants matches at least one node of
    universe lying inside parent's bounds. Each selector may match a
    different node.
    """
    pool = list(universe)
    for desc in descendants:
        if not any(parent.bounds.contains(n.bounds) and matches_selector(n, desc) for n in pool):
            return False
    return True


def filter_contains_descendants(
    candidates: Iterable[Node],
    universe: Sequence[Node],
    descendants: Sequence[Selector],
) -> List[Node]:
    return [n for n in candidates if contains_all_descendants(n, universe, descendants)]
