# uiauto_wda/exceptions.py
"""
@file exceptions.py
@brief Exception taxonomy for element resolution.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional


class UIAutoError(Exception):
    """Base exception for the framework."""
    pass


class ConfigError(UIAutoError):
    """Raised when YAML selector / object map configuration is invalid."""
    pass


class ParseError(UIAutoError):
    """Raised when a page source snapshot yields no elements."""
    pass


class QueryError(UIAutoError):
    """
    Raised by the query client when the remote server fails a request
    or returns an error envelope.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AnchorNotFoundError(UIAutoError):
    """Raised when the anchor of a relative selector matches nothing."""

    def __init__(self, anchor_description: str, relation: str):
        self.anchor_description = anchor_description
        self.relation = relation
        super().__init__(f"anchor element not found for '{relation}': '{anchor_description}'")


class NoMatchError(UIAutoError):
    """Raised when filtering leaves an empty candidate list."""

    def __init__(self, selector_description: str, message: Optional[str] = None):
        self.selector_description = selector_description
        msg = f"no elements match selector '{selector_description}'"
        if message:
            msg += f": {message}"
        super().__init__(msg)


@dataclass
class LocatorAttempt:
    """Records a single strategy attempt for debugging."""
    kind: str
    locator: str
    error: Optional[str] = None


class DeadlineExceededError(UIAutoError):
    """
    Raised when resolution does not succeed before its deadline.

    Wraps the last failure seen across polling iterations so callers can
    see why the final attempt failed, not only that time ran out.

    Attributes:
        original_exception: The last exception raised before the deadline
        description: Human-readable description of the selector
        timeout: The timeout value in seconds
        attempt_count: Number of polling iterations made
        elapsed_time: Actual elapsed time in seconds
        attempts: Strategy attempts recorded during the last iteration
        artifacts: Paths of failure artifacts written to disk
    """

    def __init__(
        self,
        message: str,
        *,
        original_exception: Optional[BaseException] = None,
        description: Optional[str] = None,
        timeout: Optional[float] = None,
        attempt_count: Optional[int] = None,
        elapsed_time: Optional[float] = None,
        attempts: Optional[List[LocatorAttempt]] = None,
        artifacts: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.original_exception = original_exception
        self.description = description
        self.timeout = timeout
        self.attempt_count = attempt_count
        self.elapsed_time = elapsed_time
        self.attempts = attempts or []
        self.artifacts = artifacts or {}

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")
        if self.artifacts:
            details.append(f"Artifacts: {self.artifacts}")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Get the root cause exception by traversing the chain.

        @return The deepest original_exception in the chain, or None
        """
        current = self.original_exception
        while current is not None:
            nested = getattr(current, "original_exception", None)
            if nested is not None:
                current = nested
            else:
                return current
        return None

    def get_traceback_str(self) -> str:
        """
        Get a formatted traceback string from the original exception.

        @return Formatted traceback string or empty string if no original exception
        """
        if self.original_exception is None:
            return ""

        import traceback
        return "".join(traceback.format_exception(
            type(self.original_exception),
            self.original_exception,
            self.original_exception.__traceback__
        ))
