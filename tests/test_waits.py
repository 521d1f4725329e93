# tests/test_waits.py
"""
Tests for the deadline object and polling loops.
"""

import threading

import pytest

from uiauto_wda.exceptions import DeadlineExceededError, QueryError
from uiauto_wda.timinglogger import TIMING_LOGGER
from uiauto_wda.waits import Deadline, poll_until_false, poll_until_resolved


class TestDeadline:
    """Tests for Deadline."""

    def test_fresh_deadline_not_expired(self):
        """Should not be expired before the timeout."""
        deadline = Deadline(5)
        assert not deadline.expired
        assert 0 < deadline.remaining() <= 5

    def test_zero_timeout_expires_immediately(self):
        """Should be expired from the start with a zero timeout."""
        deadline = Deadline(0)
        assert deadline.expired
        assert deadline.remaining() == 0.0

    def test_negative_timeout_clamped(self):
        """Should treat a negative timeout like zero."""
        assert Deadline(-3).timeout == 0.0

    def test_after_ms(self):
        """Should convert milliseconds to seconds."""
        assert Deadline.after_ms(1500).timeout == 1.5

    def test_cancel(self):
        """Should expire and report no remaining time once cancelled."""
        deadline = Deadline(60)
        deadline.cancel()
        assert deadline.cancelled
        assert deadline.expired
        assert deadline.remaining() == 0.0

    def test_cancel_from_other_thread(self):
        """Should observe a cancellation made on another thread."""
        deadline = Deadline(60)
        t = threading.Thread(target=deadline.cancel)
        t.start()
        t.join()
        assert deadline.expired


class TestPollUntilResolved:
    """Tests for poll_until_resolved."""

    def test_returns_first_success(self):
        """Should return the attempt's result immediately."""
        assert poll_until_resolved(lambda: "found", Deadline(5)) == "found"

    def test_retries_without_sleeping(self):
        """Should retry failed iterations back to back until one succeeds."""
        counter = {"value": 0}

        def attempt():
            counter["value"] += 1
            if counter["value"] < 5:
                raise QueryError("not yet")
            return counter["value"]

        assert poll_until_resolved(attempt, Deadline(5)) == 5

    def test_wraps_last_failure(self):
        """Should carry the last failure in the deadline error."""
        calls = {"n": 0}

        def attempt():
            calls["n"] += 1
            raise QueryError(f"miss {calls['n']}")

        with pytest.raises(DeadlineExceededError) as exc_info:
            poll_until_resolved(attempt, Deadline(0.2), description="Login")

        error = exc_info.value
        assert isinstance(error.original_exception, QueryError)
        assert str(error.original_exception) == f"miss {calls['n']}"
        assert error.__cause__ is error.original_exception
        assert error.attempt_count == calls["n"]
        assert "deadline exceeded" in str(error)
        assert error.get_root_cause() is error.original_exception

    def test_no_attempt_when_already_expired(self):
        """Should report the element as not found on an expired deadline."""
        with pytest.raises(DeadlineExceededError) as exc_info:
            poll_until_resolved(lambda: "never", Deadline(0), description="Login")

        error = exc_info.value
        assert error.original_exception is None
        assert error.attempt_count == 0
        assert "element 'Login' not found" in str(error)

    def test_cancelled_reason(self):
        """Should report a cancelled deadline as cancelled."""
        deadline = Deadline(60)
        deadline.cancel()
        with pytest.raises(DeadlineExceededError) as exc_info:
            poll_until_resolved(lambda: "never", deadline)
        assert "cancelled" in str(exc_info.value)

    def test_only_catches_specified_exceptions(self):
        """Should propagate exceptions outside the tuple immediately."""
        def raises_type_error():
            raise TypeError("wrong type")

        with pytest.raises(TypeError):
            poll_until_resolved(raises_type_error, Deadline(5))

    def test_timing_events_logged(self, tmp_path):
        """Should record poll start and success when timing is enabled."""
        log_file = tmp_path / "timing.log"
        TIMING_LOGGER.configure(console=False, file_path=str(log_file))
        TIMING_LOGGER.enable()

        poll_until_resolved(lambda: 1, Deadline(5), description="Login")

        content = log_file.read_text(encoding="utf-8")
        assert "event=poll_start" in content
        assert "event=poll_success" in content
        assert "description=Login" in content


class TestPollUntilFalse:
    """Tests for poll_until_false."""

    def test_returns_when_false(self):
        """Should return once the predicate turns false."""
        counter = {"value": 3}

        def predicate():
            counter["value"] -= 1
            return counter["value"] > 0

        poll_until_false(predicate, Deadline(5))
        assert counter["value"] == 0

    def test_timeout_when_always_true(self):
        """Should raise when the predicate stays true."""
        with pytest.raises(DeadlineExceededError) as exc_info:
            poll_until_false(lambda: True, Deadline(0.2), description="spinner to disappear")
        assert "spinner to disappear" in str(exc_info.value)
