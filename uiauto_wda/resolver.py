# uiauto_wda/resolver.py
"""
@file resolver.py
@brief Resolves selectors to on-screen elements with remote queries and page source fallback.

Every resolution runs against a Deadline. Each polling iteration either
asks the automation server for a handle (class chain / predicate queries)
or fetches a fresh page source and filters it locally. Relative selectors
and size constraints can only be answered locally.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .artifacts import make_artifacts
from .clickable import get_clickable_element, sort_clickable_first
from .config import TimeConfig
from .element import ElementMeta, ResolvedElement
from .exceptions import (
    AnchorNotFoundError,
    DeadlineExceededError,
    LocatorAttempt,
    NoMatchError,
    ParseError,
    QueryError,
    UIAutoError,
)
from .hierarchy import Bounds, Node, Snapshot, parse_page_source
from .interfaces import IQueryClient, IResolver
from .matcher import filter_by_selector
from .repository import Repository
from .selector import Selector
from .spatial import apply_relative_filter, filter_contains_descendants
from .strategies import (
    PREDICATE,
    QueryStrategy,
    contains_predicate,
    exact_predicate,
    interactive_strategies,
    standard_strategies,
)
from .timinglogger import TIMING_LOGGER
from .waits import Deadline, poll_until_false, poll_until_resolved


PAGE_SOURCE_STRATEGY = "page_source"
RELATIVE_STRATEGY = "relative"


def describe_selector(sel: Selector) -> str:
    return sel.describe() or str(sel.to_dict())


def deepest_matching_node(nodes: Sequence[Node]) -> Optional[Node]:
    """Node with the greatest depth; the first one seen wins ties."""
    best: Optional[Node] = None
    for node in nodes:
        if best is None or node.depth > best.depth:
            best = node
    return best


def select_candidate(candidates: Sequence[Node], index: Optional[str]) -> Node:
    """
    Pick one node from a non-empty candidate list.

    Without an index the deepest node wins. Negative indices count from
    the end; out of range or unparsable indices fall back to 0.
    """
    if not index:
        return deepest_matching_node(candidates)

    idx = 0
    try:
        i = int(index)
    except ValueError:
        i = None
    if i is not None:
        if i < 0:
            i = len(candidates) + i
        if 0 <= i < len(candidates):
            idx = i
    return candidates[idx]


def resolve_relative(sel: Selector, snapshot: Snapshot) -> Node:
    """
    Resolve a relative / containsDescendants selector against one snapshot.

    @throws AnchorNotFoundError if the active anchor matches nothing
    @throws NoMatchError if no candidate survives filtering
    """
    base = sel.base()
    if base.has_base_constraints():
        candidates = filter_by_selector(snapshot, base)
    else:
        candidates = list(snapshot)

    rel = sel.relative
    if rel is not None:
        anchors = filter_by_selector(snapshot, rel.anchor)
        if not anchors:
            raise AnchorNotFoundError(describe_selector(rel.anchor), rel.kind.value)

        matching: List[Node] = []
        for anchor in anchors:
            matching = apply_relative_filter(candidates, anchor, rel.kind)
            if matching:
                break
        candidates = matching

    if sel.contains_descendants:
        candidates = filter_contains_descendants(candidates, snapshot, sel.contains_descendants)

    if not candidates:
        raise NoMatchError(describe_selector(sel))

    candidates = sort_clickable_first(candidates)
    return select_candidate(candidates, sel.index)


def _expired(deadline: Optional[Deadline]) -> bool:
    return deadline is not None and deadline.expired


@dataclass
class _Trace:
    """Per-call diagnostics: strategy attempts of the latest iteration and the last page source."""
    attempts: List[LocatorAttempt] = field(default_factory=list)
    last_source: Optional[str] = None


AttemptFn = Callable[[Selector, Optional[Deadline], _Trace], ResolvedElement]


class Resolver(IResolver):
    """
    Resolves selectors against the automation server behind an IQueryClient.

    Holds no per-call state; concurrent calls on one instance only share
    the client and the configured timeouts.
    """

    def __init__(
        self,
        client: IQueryClient,
        find_timeout_ms: int = 0,
        optional_find_timeout_ms: int = 0,
        artifacts_dir: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        @param client Query client for the automation server
        @param find_timeout_ms Default timeout for required elements (0 = TimeConfig default)
        @param optional_find_timeout_ms Default timeout for optional elements (0 = TimeConfig default)
        @param artifacts_dir Where to dump the last page source on timeout (None = disabled)
        @param logger Logger instance (defaults to "uiauto_wda")
        """
        self.client = client
        self.find_timeout_ms = find_timeout_ms
        self.optional_find_timeout_ms = optional_find_timeout_ms
        self.artifacts_dir = artifacts_dir
        self.log = logger or logging.getLogger("uiauto_wda")

    def set_find_timeout(self, timeout_ms: int) -> None:
        self.find_timeout_ms = timeout_ms

    def set_optional_find_timeout(self, timeout_ms: int) -> None:
        self.optional_find_timeout_ms = timeout_ms

    def calculate_timeout(self, optional: bool = False, timeout_ms: int = 0) -> float:
        """
        Effective timeout in seconds.

        Precedence: explicit timeout_ms > timeout configured on the
        resolver > TimeConfig (find_element / find_optional_element).
        """
        if timeout_ms and timeout_ms > 0:
            return timeout_ms / 1000.0
        config = TimeConfig.current()
        if optional:
            if self.optional_find_timeout_ms > 0:
                return self.optional_find_timeout_ms / 1000.0
            return config.find_optional_element.timeout
        if self.find_timeout_ms > 0:
            return self.find_timeout_ms / 1000.0
        return config.find_element.timeout

    def _deadline(self, optional: bool, timeout_ms: int, deadline: Optional[Deadline]) -> Deadline:
        if deadline is not None:
            return deadline
        return Deadline(self.calculate_timeout(optional, timeout_ms))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        selector: Selector,
        optional: bool = False,
        timeout_ms: int = 0,
        deadline: Optional[Deadline] = None,
    ) -> ResolvedElement:
        """
        Resolve a selector, polling until found or the deadline passes.

        @param deadline Caller-owned deadline; cancelling it from another
               thread stops the search after the current round trip.
               Overrides optional and timeout_ms when given.
        @throws DeadlineExceededError wrapping the last failure
        """
        deadline = self._deadline(optional, timeout_ms, deadline)
        return self._poll(selector, deadline, self._attempt_standard)

    def resolve_for_tap(
        self,
        selector: Selector,
        optional: bool = False,
        timeout_ms: int = 0,
        deadline: Optional[Deadline] = None,
    ) -> ResolvedElement:
        """
        Resolve an element that is about to be tapped.

        Text selectors try interactive element types first, then an exact
        predicate before a substring one so "Password" is not shadowed by
        "Forgot Password?". Text that only exists inside a static element
        is looked up in the page source so the tap lands on its clickable
        container.
        """
        deadline = self._deadline(optional, timeout_ms, deadline)
        if selector.has_relative_selector():
            return self._poll(selector, deadline, self._attempt_relative)
        if selector.id or not selector.text:
            return self.resolve(selector, deadline=deadline)

        return self._poll(selector, deadline, self._attempt_tap)

    def resolve_once(self, selector: Selector) -> ResolvedElement:
        """Single attempt without polling; raises the attempt's own failure."""
        return self._attempt_standard(selector, None, _Trace())

    def exists(self, selector: Selector, timeout_ms: Optional[int] = None) -> bool:
        """
        Check whether an element is present.

        @param timeout_ms How long to wait (0 = single attempt, None = TimeConfig find_quick)
        """
        if timeout_ms is None:
            deadline = Deadline(TimeConfig.current().find_quick.timeout)
        else:
            deadline = Deadline.after_ms(timeout_ms)
        try:
            if deadline.timeout > 0:
                self._poll(selector, deadline, self._attempt_standard, write_artifacts=False)
            else:
                self.resolve_once(selector)
            return True
        except UIAutoError as e:
            self.log.debug("Element %r not present: %s", describe_selector(selector), e)
            return False

    def wait_for_element_gone(self, selector: Selector, timeout_ms: int = 0) -> None:
        """
        Wait for an element to disappear.

        @throws DeadlineExceededError if the element is still present at the deadline
        """
        if timeout_ms > 0:
            deadline = Deadline.after_ms(timeout_ms)
        else:
            deadline = Deadline(TimeConfig.current().element_gone.timeout)
        poll_until_false(
            lambda: self.exists(selector, timeout_ms=0),
            deadline,
            description=f"element '{describe_selector(selector)}' to disappear",
        )

    def resolve_named(
        self,
        name: str,
        repository: Repository,
        optional: bool = False,
        timeout_ms: int = 0,
        variables: Optional[Dict[str, Any]] = None,
        deadline: Optional[Deadline] = None,
    ) -> ResolvedElement:
        """
        Resolve a named selector from an object map.

        The repository's app block supplies the timeout and artifacts
        directory when neither the call nor the resolver sets them. A
        caller-supplied deadline replaces the timeout entirely.
        """
        selector = repository.get_selector(name, variables)
        app = repository.app
        if not timeout_ms:
            if optional and not self.optional_find_timeout_ms:
                timeout_ms = app.optional_find_timeout_ms
            elif not optional and not self.find_timeout_ms:
                timeout_ms = app.find_timeout_ms

        deadline = self._deadline(optional, timeout_ms, deadline)
        return self._poll(
            selector,
            deadline,
            self._attempt_standard,
            artifacts_dir=self.artifacts_dir or app.artifacts_dir,
            prefix=f"element_{name}",
        )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _poll(
        self,
        selector: Selector,
        deadline: Deadline,
        attempt: AttemptFn,
        artifacts_dir: Optional[str] = None,
        prefix: Optional[str] = None,
        write_artifacts: bool = True,
    ) -> ResolvedElement:
        description = describe_selector(selector)
        trace = _Trace()

        def once() -> ResolvedElement:
            trace.attempts = []
            return attempt(selector, deadline, trace)

        self.log.debug("Resolving %r (timeout %.2fs)", description, deadline.timeout)
        try:
            element = poll_until_resolved(once, deadline, description=description)
        except DeadlineExceededError as e:
            e.attempts = list(trace.attempts)
            if write_artifacts:
                e.artifacts = make_artifacts(
                    artifacts_dir or self.artifacts_dir,
                    prefix or f"element_{description}",
                    trace.last_source,
                )
            self.log.warning("Could not resolve %r: %s", description, e)
            raise

        self.log.info("Resolved %r via %s", description, element.meta.strategy)
        return element

    # ------------------------------------------------------------------
    # Single attempts
    # ------------------------------------------------------------------

    def _attempt_standard(self, sel: Selector, deadline: Optional[Deadline], trace: _Trace) -> ResolvedElement:
        if sel.has_relative_selector():
            return self._attempt_relative(sel, deadline, trace)

        # Remote queries cannot express width/height.
        if not sel.has_size():
            try:
                return self._find_by_strategies(sel, standard_strategies(sel), deadline, trace)
            except QueryError:
                if _expired(deadline):
                    raise

        return self._find_by_snapshot(sel, trace)

    def _attempt_relative(self, sel: Selector, deadline: Optional[Deadline], trace: _Trace) -> ResolvedElement:
        snapshot = self._load_snapshot(trace)
        description = describe_selector(sel)
        try:
            node = resolve_relative(sel, snapshot)
        except UIAutoError as e:
            trace.attempts.append(LocatorAttempt(kind=RELATIVE_STRATEGY, locator=description, error=str(e)))
            raise
        trace.attempts.append(LocatorAttempt(kind=RELATIVE_STRATEGY, locator=description))
        return ResolvedElement(
            text=node.label,
            bounds=node.bounds,
            enabled=node.enabled,
            visible=node.displayed,
            meta=ElementMeta(selector=description, strategy=RELATIVE_STRATEGY),
        )

    def _attempt_tap(self, sel: Selector, deadline: Optional[Deadline], trace: _Trace) -> ResolvedElement:
        try:
            return self._find_by_strategies(sel, interactive_strategies(sel), deadline, trace)
        except QueryError:
            if _expired(deadline):
                raise

        exact = QueryStrategy("exact_text", PREDICATE, exact_predicate(sel))
        contains = QueryStrategy("contains_text", PREDICATE, contains_predicate(sel))

        handle = self._try_strategy(exact, trace)
        fallback = exact
        contains_error: Optional[QueryError] = None
        if handle is None:
            fallback = contains
            try:
                handle = self.client.find_element(contains.using, contains.value)
                trace.attempts.append(LocatorAttempt(kind=contains.name, locator=str(contains)))
            except QueryError as e:
                contains_error = e
                trace.attempts.append(LocatorAttempt(kind=contains.name, locator=str(contains), error=str(e)))

        try:
            return self._find_by_snapshot(sel, trace)
        except UIAutoError as e:
            if handle is None:
                raise contains_error or e
            self.log.debug("Page source lookup for %r failed, using %s match: %s", sel.text, fallback.name, e)

        return self._element_info(handle, sel, fallback)

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def _try_strategy(self, strategy: QueryStrategy, trace: _Trace) -> Optional[str]:
        started = time.monotonic()
        try:
            handle = self.client.find_element(strategy.using, strategy.value)
        except QueryError as e:
            self.log.debug("Strategy %s missed: %s", strategy, e)
            if TIMING_LOGGER.is_enabled():
                TIMING_LOGGER.strategy_attempt(strategy.value, strategy.name, started, e)
            trace.attempts.append(LocatorAttempt(kind=strategy.name, locator=str(strategy), error=str(e)))
            return None
        if TIMING_LOGGER.is_enabled():
            TIMING_LOGGER.strategy_attempt(strategy.value, strategy.name, started)
        trace.attempts.append(LocatorAttempt(kind=strategy.name, locator=str(strategy)))
        return handle

    def _find_by_strategies(
        self,
        sel: Selector,
        strategies: List[QueryStrategy],
        deadline: Optional[Deadline],
        trace: _Trace,
    ) -> ResolvedElement:
        for strategy in strategies:
            if _expired(deadline):
                break
            handle = self._try_strategy(strategy, trace)
            if handle is not None:
                self.log.debug("Strategy %s matched element %s", strategy, handle)
                return self._element_info(handle, sel, strategy)
        raise QueryError(f"element '{describe_selector(sel)}' not found via remote queries")

    def _element_info(self, handle: str, sel: Selector, strategy: QueryStrategy) -> ResolvedElement:
        """Fetch text, rect and visibility; a failed attribute keeps its default."""
        text = ""
        rect = (0, 0, 0, 0)
        visible = False
        try:
            text = self.client.element_text(handle)
        except QueryError as e:
            self.log.debug("Could not read text of %s: %s", handle, e)
        try:
            rect = self.client.element_rect(handle)
        except QueryError as e:
            self.log.debug("Could not read rect of %s: %s", handle, e)
        try:
            visible = self.client.element_displayed(handle)
        except QueryError as e:
            self.log.debug("Could not read visibility of %s: %s", handle, e)

        return ResolvedElement(
            text=text,
            bounds=Bounds(*rect),
            enabled=True,
            visible=visible,
            element_id=handle,
            meta=ElementMeta(selector=describe_selector(sel), strategy=strategy.name, used_locator=strategy.value),
        )

    def _load_snapshot(self, trace: _Trace) -> Snapshot:
        try:
            source = self.client.source()
            trace.last_source = source
            return parse_page_source(source)
        except (QueryError, ParseError) as e:
            trace.attempts.append(LocatorAttempt(kind=PAGE_SOURCE_STRATEGY, locator="source", error=str(e)))
            raise

    def _find_by_snapshot(self, sel: Selector, trace: _Trace) -> ResolvedElement:
        """
        Filter a fresh page source, prefer interactive nodes, then take the
        indexed or deepest one. The returned bounds belong to its nearest
        clickable ancestor so a tap on a static label hits its container.
        """
        description = describe_selector(sel)
        snapshot = self._load_snapshot(trace)
        candidates = filter_by_selector(snapshot, sel)
        if not candidates:
            err = NoMatchError(description)
            trace.attempts.append(LocatorAttempt(kind=PAGE_SOURCE_STRATEGY, locator=description, error=str(err)))
            raise err

        candidates = sort_clickable_first(candidates)
        selected = select_candidate(candidates, sel.index)
        target = get_clickable_element(selected, snapshot)
        trace.attempts.append(LocatorAttempt(kind=PAGE_SOURCE_STRATEGY, locator=description))
        return ResolvedElement(
            text=selected.label,
            bounds=target.bounds,
            enabled=selected.enabled,
            visible=selected.displayed,
            meta=ElementMeta(selector=description, strategy=PAGE_SOURCE_STRATEGY),
        )
