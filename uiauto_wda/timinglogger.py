# uiauto_wda/timinglogger.py
"""
@file timinglogger.py
@brief Poll and strategy timing events for resolution loops.

Every event is one "[status] [timing] key=value ..." line so runs can be
grepped. Events are emitted only while the logger is enabled.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .waits import Deadline


class TimingLogger:
    """
    Thread-safe timing logger. Disabled by default.

    Lines go to the "uiauto_wda.timing" logger when console output is on,
    and are appended to file_path when one is configured. Events with
    status "error" are logged at WARNING regardless of the configured level.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._level = logging.INFO
        self._log = logging.getLogger("uiauto_wda.timing")

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        level: str = "INFO",
    ) -> None:
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._level = numeric

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    # Resolution events
    # ------------------------------------------------------------------

    def poll_started(self, description: str, deadline: Deadline) -> None:
        self.log(event="poll_start", description=description, metadata={"timeout_s": deadline.timeout})

    def poll_succeeded(self, description: str, deadline: Deadline, attempts: int) -> None:
        self.log(
            event="poll_success",
            description=description,
            status="success",
            metadata={"attempts": attempts, "elapsed_s": round(deadline.elapsed(), 3)},
        )

    def poll_failed(
        self,
        description: str,
        deadline: Deadline,
        attempts: int,
        last_error: Optional[BaseException] = None,
    ) -> None:
        """Deadline ran out or was cancelled; reported at WARNING."""
        metadata: Dict[str, Any] = {
            "timeout_s": deadline.timeout,
            "attempts": attempts,
            "elapsed_s": round(deadline.elapsed(), 3),
        }
        if last_error is not None:
            metadata["last_error"] = type(last_error).__name__
        self.log(
            event="poll_cancelled" if deadline.cancelled else "poll_timeout",
            description=description,
            status="error",
            metadata=metadata,
        )

    def strategy_attempt(
        self,
        description: str,
        strategy: str,
        started: float,
        error: Optional[BaseException] = None,
    ) -> None:
        """One remote round trip; started is a time.monotonic() reading."""
        self.log(
            event="strategy",
            description=description,
            status="miss" if error is not None else "hit",
            metadata={"strategy": strategy, "round_trip_ms": int((time.monotonic() - started) * 1000)},
        )

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def log(
        self,
        *,
        event: str,
        description: Optional[str] = None,
        status: str = "info",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self._enabled:
            return

        parts = [
            f"[{status.lower()}]",
            "[timing]",
            f"time={time.strftime('%H:%M:%S')}",
            f"event={event}",
        ]
        if description:
            parts.append(f"description={description}")
        for key, value in (metadata or {}).items():
            parts.append(f"{key}={value}")
        line = " ".join(parts)

        if self._console:
            level = logging.WARNING if status == "error" else self._level
            self._log.log(level, line)

        if self._file_path:
            self._write_file(line)

    def _write_file(self, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self._file_path)) or ".", exist_ok=True)
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            self._log.warning("Could not write timing log %s: %s", self._file_path, e)


TIMING_LOGGER = TimingLogger()
