"""
Circuit breaker for outbound provider calls.
Trips when the error percentage over a rolling window crosses a threshold, fails fast while
open, and lets a single trial call through after the reset timeout.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from enum import Enum
from typing import Any, Awaitable, Callable

from app.errors import CircuitOpenError, CircuitTimeoutError

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing if service recovered


StateListener = Callable[[CircuitState, CircuitState], Any]


class CircuitBreaker:
    """
    Async circuit breaker with a rolling error-percentage window and per-call timeout.
    Use from a single event loop; state changes happen between awaits.
    """

    def __init__(
        self,
        timeout_sec: float | None = 12.0,
        error_threshold_percentage: float = 50.0,
        reset_timeout_sec: float = 30.0,
        rolling_window_sec: float = 10.0,
        volume_threshold: int = 1,
        name: str = "circuit",
        is_ignored_error: Callable[[BaseException], bool] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            timeout_sec: Per-call timeout; None or <= 0 disables it. A timeout counts as a failure.
            error_threshold_percentage: Failure share (0-100] of windowed calls that opens the circuit
            reset_timeout_sec: Seconds to stay open before allowing a trial call (half-open)
            rolling_window_sec: Window over which outcomes are counted
            volume_threshold: Minimum calls in the window before the percentage is evaluated
            name: Name for logging
            is_ignored_error: Predicate for exceptions that propagate without counting as failures
            clock: Monotonic time source (injectable for tests)
        """
        self._timeout_sec = timeout_sec if timeout_sec and timeout_sec > 0 else None
        self._threshold = max(0.01, min(100.0, float(error_threshold_percentage)))
        self._reset_timeout_sec = max(0.0, reset_timeout_sec)
        self._window_sec = max(0.001, rolling_window_sec)
        self._volume_threshold = max(1, int(volume_threshold))
        self._name = name
        self._is_ignored_error = is_ignored_error
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._window: deque[tuple[float, bool]] = deque()
        self._opened_at: float | None = None
        self._trial_in_flight = False
        self._listeners: list[StateListener] = []

    @property
    def name(self) -> str:
        return self._name

    def on_state_change(self, listener: StateListener) -> None:
        """Register listener(old_state, new_state), called after every transition."""
        self._listeners.append(listener)

    def _transition(self, new_state: CircuitState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        if new_state == CircuitState.OPEN:
            logger.warning("%s: Circuit OPEN", self._name)
        elif new_state == CircuitState.HALF_OPEN:
            logger.info("%s: Circuit HALF_OPEN (testing recovery)", self._name)
        else:
            logger.info("%s: Circuit CLOSED", self._name)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception as e:
                logger.warning("%s: state listener failed: %s", self._name, e)

    def _prune(self, now: float) -> None:
        cutoff = now - self._window_sec
        while self._window and self._window[0][0] < cutoff:
            self._window.popleft()

    def _before_call(self) -> bool:
        """Admit or reject a call. Returns True when the call is the half-open trial."""
        if self._state == CircuitState.CLOSED:
            return False
        now = self._clock()
        if self._state == CircuitState.OPEN:
            elapsed = now - (self._opened_at or now)
            if elapsed < self._reset_timeout_sec:
                raise CircuitOpenError(
                    f"Circuit breaker is OPEN ({self._name}, retry in "
                    f"{self._reset_timeout_sec - elapsed:.1f}s)"
                )
            self._transition(CircuitState.HALF_OPEN)
        if self._trial_in_flight:
            raise CircuitOpenError(
                f"Circuit breaker is HALF_OPEN ({self._name}, trial call in flight)"
            )
        self._trial_in_flight = True
        return True

    def _record_success(self, trial: bool) -> None:
        now = self._clock()
        if trial:
            self._trial_in_flight = False
            self._window.clear()
            self._opened_at = None
            self._transition(CircuitState.CLOSED)
            return
        self._prune(now)
        self._window.append((now, True))

    def _record_failure(self, trial: bool) -> None:
        now = self._clock()
        if trial:
            self._trial_in_flight = False
            self._opened_at = now
            self._transition(CircuitState.OPEN)
            return
        if self._state != CircuitState.CLOSED:
            return
        self._prune(now)
        self._window.append((now, False))
        total = len(self._window)
        failures = sum(1 for _ts, ok in self._window if not ok)
        if total >= self._volume_threshold and failures * 100.0 / total >= self._threshold:
            self._opened_at = now
            self._transition(CircuitState.OPEN)
            logger.warning(
                "%s: %d/%d calls failed in the last %.1fs",
                self._name,
                failures,
                total,
                self._window_sec,
            )

    async def call(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        """
        Await func(*args, **kwargs) with circuit breaker protection.

        Returns:
            The awaited result

        Raises:
            CircuitOpenError: Circuit is open (func is not called)
            CircuitTimeoutError: Call exceeded timeout_sec
            Exception: Whatever func raised
        """
        trial = self._before_call()
        try:
            if self._timeout_sec is not None:
                result = await asyncio.wait_for(func(*args, **kwargs), self._timeout_sec)
            else:
                result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            if trial:
                self._trial_in_flight = False
            raise
        except asyncio.TimeoutError:
            self._record_failure(trial)
            logger.warning("%s: call timed out after %ss", self._name, self._timeout_sec)
            raise CircuitTimeoutError(
                f"{self._name}: call timed out after {self._timeout_sec}s"
            ) from None
        except Exception as e:
            if self._is_ignored_error is not None and self._is_ignored_error(e):
                if trial:
                    self._record_success(trial)
                raise
            self._record_failure(trial)
            raise
        self._record_success(trial)
        return result

    def get_state(self) -> CircuitState:
        """Get current circuit state (an elapsed open circuit still reports OPEN until the next call)."""
        return self._state

    def stats(self) -> dict[str, Any]:
        """Windowed call counts and state, for status endpoints."""
        self._prune(self._clock())
        failures = sum(1 for _ts, ok in self._window if not ok)
        return {
            "name": self._name,
            "state": self._state.value,
            "calls": len(self._window),
            "failures": failures,
            "successes": len(self._window) - failures,
        }

    def reset(self) -> None:
        """Manually reset circuit to CLOSED state."""
        self._window.clear()
        self._opened_at = None
        self._trial_in_flight = False
        self._transition(CircuitState.CLOSED)
        logger.info("%s: Circuit manually reset", self._name)
