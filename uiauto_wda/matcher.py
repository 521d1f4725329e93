# uiauto_wda/matcher.py
"""
@file matcher.py
@brief Evaluates the non-relative predicates of a selector against a node.
"""

from __future__ import annotations
import re
from typing import Iterable, List

from .hierarchy import Node
from .selector import Selector


_REGEX_CHARS = frozenset("*+?[]{}|()")
_QUANTIFIERS = frozenset("*+?")


def looks_like_regex(text: str) -> bool:
    """
    Decide whether a selector text should be compiled as a pattern.

    A lone "." is literal so "mastodon.social" and "v1.2.3" stay plain
    text, while "Log.*" or "^Start" are patterns.
    """
    last = len(text) - 1
    for i, c in enumerate(text):
        if i > 0 and text[i - 1] == "\\":
            continue
        if c == ".":
            if i < last and text[i + 1] in _QUANTIFIERS:
                return True
        elif c in _REGEX_CHARS:
            return True
        elif c == "^":
            if i == 0:
                return True
        elif c == "$":
            if i == last:
                return True
    return False


def _contains_ignore_case(text: str, pattern: str) -> bool:
    return pattern.lower() in text.lower()


def matches_text(pattern: str, *texts: str) -> bool:
    """True if pattern matches any of texts (regex or case-insensitive substring)."""
    if looks_like_regex(pattern):
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error:
            return any(_contains_ignore_case(t, pattern) for t in texts)

        for t in texts:
            if not t:
                continue
            if compiled.search(t) or compiled.search(t.replace("\n", " ")) or t == pattern:
                return True
        return False

    return any(_contains_ignore_case(t, pattern) for t in texts)


def within_tolerance(actual: int, expected: int, tolerance: int) -> bool:
    return abs(actual - expected) <= tolerance


def matches_selector(node: Node, sel: Selector) -> bool:
    if sel.text and not matches_text(sel.text, *node.texts()):
        return False

    if sel.id and sel.id not in node.name:
        return False

    if sel.has_size():
        tolerance = sel.effective_tolerance
        if sel.width and not within_tolerance(node.bounds.width, sel.width, tolerance):
            return False
        if sel.height and not within_tolerance(node.bounds.height, sel.height, tolerance):
            return False

    if sel.enabled is not None and node.enabled != sel.enabled:
        return False
    if sel.selected is not None and node.selected != sel.selected:
        return False
    if sel.focused is not None and node.focused != sel.focused:
        return False

    return True


def filter_by_selector(nodes: Iterable[Node], sel: Selector) -> List[Node]:
    return [n for n in nodes if matches_selector(n, sel)]
