"""
@file interfaces.py
@brief Abstract base classes for the query protocol and element resolution.

The resolver only talks to the automation server through IQueryClient,
so any transport (HTTP client, recorded fixtures, test fakes) can back it.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .element import ResolvedElement
from .selector import Selector
from .waits import Deadline


class IQueryClient(ABC):
    """
    Remote query protocol consumed by the resolver.

    Every method raises QueryError when the server cannot answer.
    """

    @abstractmethod
    def find_element(self, using: str, value: str) -> str:
        """
        Find one element with a locator strategy.

        Args:
            using: Strategy name ("class chain", "predicate string", ...)
            value: Query in the strategy's syntax

        Returns:
            Opaque element handle
        """
        pass

    @abstractmethod
    def element_text(self, element_id: str) -> str:
        """Return the element's text."""
        pass

    @abstractmethod
    def element_displayed(self, element_id: str) -> bool:
        """Return whether the element is visible."""
        pass

    @abstractmethod
    def element_rect(self, element_id: str) -> Tuple[int, int, int, int]:
        """
        Return the element rectangle.

        Returns:
            (x, y, width, height), truncated to integers
        """
        pass

    @abstractmethod
    def source(self) -> str:
        """Return the full page source XML of the current screen."""
        pass


class IResolver(ABC):
    """
    Abstract resolver interface.

    Turns a selector into a ResolvedElement or raises once the deadline
    derived from the timeout passes.
    """

    @abstractmethod
    def resolve(
        self,
        selector: Selector,
        optional: bool = False,
        timeout_ms: int = 0,
        deadline: Optional[Deadline] = None,
    ) -> ResolvedElement:
        """
        Resolve a selector, polling until found or timed out.

        Args:
            selector: Element query
            optional: Use the shorter optional-element default timeout
            timeout_ms: Explicit timeout; 0 uses the configured default
            deadline: Shared, cancellable deadline that replaces the timeout

        Returns:
            The resolved element
        """
        pass

    @abstractmethod
    def resolve_once(self, selector: Selector) -> ResolvedElement:
        """Single resolution attempt without polling."""
        pass
