# uiauto_wda/element.py
"""
@file element.py
@brief Resolved element value object handed to action handlers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .hierarchy import Bounds


@dataclass
class ElementMeta:
    """
    Metadata about how an element was found.
    Used for debugging and error reporting.
    """
    selector: str = ""
    strategy: str = ""
    used_locator: Optional[str] = None


@dataclass
class ResolvedElement:
    """
    Outcome of a resolution. element_id is the remote handle when a
    server query found the element, None when it came from a snapshot.
    """
    text: str = ""
    bounds: Bounds = field(default_factory=Bounds)
    enabled: bool = True
    visible: bool = False
    element_id: Optional[str] = None
    meta: ElementMeta = field(default_factory=ElementMeta, compare=False)

    def center(self) -> Tuple[int, int]:
        return self.bounds.center()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.element_id,
            "text": self.text,
            "bounds": {
                "x": self.bounds.x,
                "y": self.bounds.y,
                "width": self.bounds.width,
                "height": self.bounds.height,
            },
            "enabled": self.enabled,
            "visible": self.visible,
            "strategy": self.meta.strategy,
        }
