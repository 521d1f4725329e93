# uiauto_wda/selector.py
"""
@file selector.py
@brief Declarative element selector and its YAML representation.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import yaml

from .exceptions import ConfigError


DEFAULT_TOLERANCE = 5


class RelativeKind(Enum):
    """Spatial relation between a candidate and an anchor element."""
    BELOW = "below"
    ABOVE = "above"
    LEFT_OF = "leftOf"
    RIGHT_OF = "rightOf"
    CHILD_OF = "childOf"
    CONTAINS_CHILD = "containsChild"
    INSIDE_OF = "insideOf"


# Selector attribute per relation, in priority order. When a selector sets
# several relations only the first one here is applied.
RELATIVE_PRIORITY: Tuple[Tuple[RelativeKind, str], ...] = (
    (RelativeKind.BELOW, "below"),
    (RelativeKind.ABOVE, "above"),
    (RelativeKind.LEFT_OF, "left_of"),
    (RelativeKind.RIGHT_OF, "right_of"),
    (RelativeKind.CHILD_OF, "child_of"),
    (RelativeKind.CONTAINS_CHILD, "contains_child"),
    (RelativeKind.INSIDE_OF, "inside_of"),
)

_YAML_KEYS: Dict[str, str] = {
    "text": "text",
    "id": "id",
    "width": "width",
    "height": "height",
    "tolerance": "tolerance",
    "enabled": "enabled",
    "selected": "selected",
    "focused": "focused",
    "index": "index",
    "below": "below",
    "above": "above",
    "leftOf": "left_of",
    "rightOf": "right_of",
    "childOf": "child_of",
    "containsChild": "contains_child",
    "insideOf": "inside_of",
    "containsDescendants": "contains_descendants",
}

_ANCHOR_FIELDS = {attr for _, attr in RELATIVE_PRIORITY}


@dataclass(frozen=True)
class RelativeConstraint:
    """The single active relation of a selector and the anchor it is measured against."""
    kind: RelativeKind
    anchor: Selector


@dataclass(frozen=True)
class Selector:
    """
    Immutable element query.

    Unset fields (None / empty) are "don't care". Relative fields hold
    nested anchor selectors; `relative` exposes the one that applies.
    """
    text: Optional[str] = None
    id: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    tolerance: Optional[int] = None
    enabled: Optional[bool] = None
    selected: Optional[bool] = None
    focused: Optional[bool] = None
    index: Optional[str] = None
    below: Optional[Selector] = None
    above: Optional[Selector] = None
    left_of: Optional[Selector] = None
    right_of: Optional[Selector] = None
    child_of: Optional[Selector] = None
    contains_child: Optional[Selector] = None
    inside_of: Optional[Selector] = None
    contains_descendants: Tuple[Selector, ...] = ()
    _relative: Optional[RelativeConstraint] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.contains_descendants, tuple):
            object.__setattr__(self, "contains_descendants", tuple(self.contains_descendants))
        if self.index is not None and not isinstance(self.index, str):
            object.__setattr__(self, "index", str(self.index))
        relative = None
        for kind, attr in RELATIVE_PRIORITY:
            anchor = getattr(self, attr)
            if anchor is not None:
                relative = RelativeConstraint(kind=kind, anchor=anchor)
                break
        object.__setattr__(self, "_relative", relative)

    @property
    def relative(self) -> Optional[RelativeConstraint]:
        return self._relative

    @property
    def effective_tolerance(self) -> int:
        return DEFAULT_TOLERANCE if self.tolerance is None else self.tolerance

    def has_relative_selector(self) -> bool:
        """True when resolution needs the local tree: an anchor or descendant constraints."""
        return self._relative is not None or bool(self.contains_descendants)

    def has_size(self) -> bool:
        return bool(self.width) or bool(self.height)

    def has_base_constraints(self) -> bool:
        return bool(self.text) or bool(self.id) or self.has_size()

    def is_empty(self) -> bool:
        return not self.has_base_constraints() and not self.has_relative_selector()

    def base(self) -> Selector:
        """Copy of this selector without relative and descendant constraints."""
        return replace(
            self,
            below=None,
            above=None,
            left_of=None,
            right_of=None,
            child_of=None,
            contains_child=None,
            inside_of=None,
            contains_descendants=(),
        )

    def describe(self) -> str:
        if self.text:
            return self.text
        if self.id:
            return "#" + self.id
        return ""

    def describe_quoted(self) -> str:
        if self.text:
            return f'text="{self.text}"'
        if self.id:
            return f'id="{self.id}"'
        return ""

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict; only set fields are emitted."""
        out: Dict[str, Any] = {}
        attr_to_key = {attr: key for key, attr in _YAML_KEYS.items()}
        for f in fields(self):
            if f.name == "_relative":
                continue
            value = getattr(self, f.name)
            if value is None or value == ():
                continue
            key = attr_to_key[f.name]
            if isinstance(value, Selector):
                out[key] = value.to_dict()
            elif f.name == "contains_descendants":
                out[key] = [s.to_dict() for s in value]
            else:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Any, *, strict: bool = True, where: str = "selector") -> Selector:
        """
        Build a selector from parsed YAML.

        A bare string is shorthand for {text: ...}; "element" is an alias
        for "text". Unknown keys raise ConfigError when strict.
        """
        if isinstance(data, str):
            return cls(text=data)
        if not isinstance(data, dict):
            raise ConfigError(f"{where}: selector must be a string or mapping, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "element":
                if not data.get("text"):
                    kwargs["text"] = str(value)
                continue
            attr = _YAML_KEYS.get(key)
            if attr is None:
                if strict:
                    raise ConfigError(f"{where}: unknown selector key '{key}'. Allowed: {sorted(_YAML_KEYS) + ['element']}")
                continue
            if value is None:
                continue
            kwargs[attr] = _coerce(attr, value, f"{where}.{key}", strict)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, text: str, *, strict: bool = True) -> Selector:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid selector YAML: {e}") from e
        return cls.from_dict(data, strict=strict)


def _coerce(attr: str, value: Any, where: str, strict: bool) -> Any:
    if attr in _ANCHOR_FIELDS:
        return Selector.from_dict(value, strict=strict, where=where)
    if attr == "contains_descendants":
        if not isinstance(value, list):
            raise ConfigError(f"{where}: must be a list of selectors")
        return tuple(
            Selector.from_dict(item, strict=strict, where=f"{where}[{i}]")
            for i, item in enumerate(value)
        )
    if attr in ("width", "height", "tolerance"):
        if isinstance(value, bool):
            raise ConfigError(f"{where}: expected an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{where}: expected an integer, got {value!r}") from e
    if attr in ("enabled", "selected", "focused"):
        if not isinstance(value, bool):
            raise ConfigError(f"{where}: expected true/false, got {value!r}")
        return value
    if attr == "index":
        return str(value)
    return str(value)
