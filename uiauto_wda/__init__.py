# uiauto_wda/__init__.py
"""
UIAuto WDA - Element resolution engine for WebDriverAgent-style automation servers.

This package provides:
- Selector: Declarative element queries (YAML loadable)
- Resolver: Deadline-bound resolution with remote queries and page source fallback
- Hierarchy: Page source parsing into a flat node arena
- Matcher / spatial / clickable: Local filtering and candidate ordering
- WDAClient: httpx client for the consumed query endpoints
- Repository: YAML object map of named selectors
- TimeConfig: Centralized timeout configuration
"""

from uiauto_wda.selector import Selector, RelativeKind, RelativeConstraint
from uiauto_wda.hierarchy import Bounds, Node, Snapshot, parse_page_source
from uiauto_wda.element import ResolvedElement, ElementMeta
from uiauto_wda.resolver import Resolver
from uiauto_wda.client import WDAClient
from uiauto_wda.repository import Repository, AppConfig
from uiauto_wda.config import TimeConfig
from uiauto_wda.waits import Deadline
from uiauto_wda.exceptions import (
    UIAutoError,
    ConfigError,
    ParseError,
    QueryError,
    AnchorNotFoundError,
    NoMatchError,
    DeadlineExceededError,
    LocatorAttempt,
)
from uiauto_wda.interfaces import IQueryClient, IResolver
from uiauto_wda.timinglogger import TIMING_LOGGER

__all__ = [
    "Selector",
    "RelativeKind",
    "RelativeConstraint",
    "Bounds",
    "Node",
    "Snapshot",
    "parse_page_source",
    "ResolvedElement",
    "ElementMeta",
    "Resolver",
    "WDAClient",
    "Repository",
    "AppConfig",
    "TimeConfig",
    "Deadline",
    "UIAutoError",
    "ConfigError",
    "ParseError",
    "QueryError",
    "AnchorNotFoundError",
    "NoMatchError",
    "DeadlineExceededError",
    "LocatorAttempt",
    "IQueryClient",
    "IResolver",
    "TIMING_LOGGER",
]

__version__ = "1.0.0"
