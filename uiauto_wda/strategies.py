# uiauto_wda/strategies.py
"""
@file strategies.py
@brief Remote locator queries built from a selector, in priority order.

Class chain queries are tried first; every class chain has a flatter
predicate string twin because class chain lookups can fail while the app
is not quiescent even though a predicate query would succeed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List

from .selector import Selector


CLASS_CHAIN = "class chain"
PREDICATE = "predicate string"

TEXT_FIELD = "XCUIElementTypeTextField"
SECURE_TEXT_FIELD = "XCUIElementTypeSecureTextField"
SEARCH_FIELD = "XCUIElementTypeSearchField"
BUTTON = "XCUIElementTypeButton"


@dataclass(frozen=True)
class QueryStrategy:
    name: str
    using: str
    value: str

    def __str__(self) -> str:
        return f"{self.name} [{self.using}] {self.value}"


def quote(text: str) -> str:
    """Single-quoted predicate literal; embedded quotes and backslashes are escaped."""
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def build_state_filter(sel: Selector) -> str:
    """
    Predicate clauses for the state fields the caller actually set,
    prefixed with " AND ". Empty when none are set.
    """
    conditions = []
    if sel.enabled is not None:
        conditions.append(f"enabled == {'true' if sel.enabled else 'false'}")
    if sel.selected is not None:
        conditions.append(f"selected == {'true' if sel.selected else 'false'}")
    if sel.focused is not None:
        conditions.append(f"hasFocus == {'true' if sel.focused else 'false'}")
    if not conditions:
        return ""
    return " AND " + " AND ".join(conditions)


def _any_of(attrs: List[str], op: str, text: str) -> str:
    q = quote(text)
    return "(" + " OR ".join(f"{a} {op} {q}" for a in attrs) + ")"


def _chain(elem_type: str, condition: str) -> str:
    return f"**/{elem_type}[`{condition}`]"


def _field_condition(text: str) -> str:
    return _any_of(["label", "value", "placeholderValue"], "CONTAINS[c]", text)


def _predicate_field_condition(text: str) -> str:
    # placeholderValue is not reliably queryable through predicates
    return _any_of(["label", "value"], "CONTAINS[c]", text)


def contains_predicate(sel: Selector) -> str:
    return _any_of(["label", "name", "value"], "CONTAINS[c]", sel.text or "") + build_state_filter(sel)


def exact_predicate(sel: Selector) -> str:
    """Verbatim, case-sensitive match so "Password" never picks "Forgot Password?"."""
    return _any_of(["label", "name", "value"], "==", sel.text or "") + build_state_filter(sel)


def id_strategies(sel: Selector) -> List[QueryStrategy]:
    if not sel.id:
        return []
    state = build_state_filter(sel)
    cond = f"name CONTAINS {quote(sel.id)}{state}"
    return [
        QueryStrategy("id", CLASS_CHAIN, _chain("XCUIElementTypeAny", cond)),
        QueryStrategy("id", PREDICATE, cond),
    ]


def text_strategies(sel: Selector) -> List[QueryStrategy]:
    """Strategies for the general search: field types, then buttons, then any element."""
    if not sel.text:
        return []
    state = build_state_filter(sel)
    text = sel.text
    button_cond = _any_of(["label", "name"], "CONTAINS[c]", text)
    return [
        QueryStrategy("text_field", CLASS_CHAIN, _chain(TEXT_FIELD, _field_condition(text) + state)),
        QueryStrategy("secure_field", CLASS_CHAIN, _chain(SECURE_TEXT_FIELD, _field_condition(text) + state)),
        QueryStrategy("button", CLASS_CHAIN, _chain(BUTTON, button_cond + state)),
        QueryStrategy("text_field", PREDICATE, f"type == '{TEXT_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("secure_field", PREDICATE, f"type == '{SECURE_TEXT_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("search_field", PREDICATE, f"type == '{SEARCH_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("button", PREDICATE, f"type == '{BUTTON}' AND {button_cond}{state}"),
        QueryStrategy("any_text", PREDICATE, contains_predicate(sel)),
    ]


def standard_strategies(sel: Selector) -> List[QueryStrategy]:
    return id_strategies(sel) + text_strategies(sel)


def interactive_strategies(sel: Selector) -> List[QueryStrategy]:
    """
    Tap-oriented strategies limited to interactive types. Buttons match
    exactly (==[c]) so a longer button title containing the text loses.
    """
    if not sel.text:
        return []
    state = build_state_filter(sel)
    text = sel.text
    button_cond = _any_of(["label", "name"], "==[c]", text)
    return [
        QueryStrategy("text_field", CLASS_CHAIN, _chain(TEXT_FIELD, _field_condition(text) + state)),
        QueryStrategy("secure_field", CLASS_CHAIN, _chain(SECURE_TEXT_FIELD, _field_condition(text) + state)),
        QueryStrategy("button", CLASS_CHAIN, _chain(BUTTON, button_cond + state)),
        QueryStrategy("text_field", PREDICATE, f"type == '{TEXT_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("secure_field", PREDICATE, f"type == '{SECURE_TEXT_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("search_field", PREDICATE, f"type == '{SEARCH_FIELD}' AND {_predicate_field_condition(text)}{state}"),
        QueryStrategy("button", PREDICATE, f"type == '{BUTTON}' AND {button_cond}{state}"),
    ]
