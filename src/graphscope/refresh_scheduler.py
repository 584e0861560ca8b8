"""
Throttled refresh scheduling.

Hosts fire "the graph may have changed" as often as they like; the scheduler
coalesces a burst into at most one pass per interval. The first signal after a
quiet interval runs at once; signals inside the interval collapse into one
trailing pass at the end of it. Because a pass reads the live graph, the
trailing pass always reflects the most recent change.

Two ways to get the trailing pass executed:

- pass ``call_later(delay, callback)`` (e.g. ``asyncio`` loop's
  ``call_later``) and the scheduler arms a timer itself, or
- call ``poll()`` from the host's own update loop.
"""

import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Leading- and trailing-edge throttle around a synchronous pass.

    Args:
        run_pass: Runs one complete refresh pass.
        interval: Minimum seconds between the starts of two passes.
        clock: Monotonic time source.
        call_later: Optional timer hook ``(delay, callback) -> handle``. A
                    handle with a ``cancel()`` method is cancelled when the
                    pending pass is flushed or dropped.
    """

    def __init__(
        self,
        run_pass: Callable[[], None],
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        call_later: Optional[Callable[[float, Callable[[], None]], Any]] = None,
    ):
        if interval < 0:
            raise ValueError(f"Refresh interval must be >= 0, got {interval}")
        self._run_pass = run_pass
        self._interval = interval
        self._clock = clock
        self._call_later = call_later
        self._last_run: Optional[float] = None
        self._pending = False
        self._timer_handle: Any = None
        self.passes_run = 0
        self.signals_coalesced = 0

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def interval(self) -> float:
        return self._interval

    def due_at(self) -> Optional[float]:
        """Clock time at which the pending pass may run, or None."""
        if not self._pending:
            return None
        return (self._last_run or 0.0) + self._interval

    def notify(self) -> bool:
        """Signal a possible graph change. Returns True if a pass ran now."""
        now = self._clock()
        if not self._pending and (self._last_run is None or now - self._last_run >= self._interval):
            self._run()
            return True

        if self._pending:
            self.signals_coalesced += 1
            return False

        self._pending = True
        if self._call_later is not None:
            delay = max(0.0, self._last_run + self._interval - now)
            self._timer_handle = self._call_later(delay, self._on_timer)
        logger.debug(f"Refresh deferred until {self.due_at():.3f}")
        return False

    def poll(self) -> bool:
        """Run the pending pass if its interval has elapsed."""
        if self._pending and self._clock() >= self.due_at():
            self._run()
            return True
        return False

    def flush(self) -> bool:
        """Run the pending pass now, ignoring the interval."""
        if not self._pending:
            return False
        self._run()
        return True

    def cancel(self) -> None:
        """Drop the pending pass, if any."""
        self._pending = False
        self._cancel_timer()

    def _on_timer(self) -> None:
        self._timer_handle = None
        if self._pending:
            self._run()

    def _run(self) -> None:
        self._pending = False
        self._cancel_timer()
        self._last_run = self._clock()
        self.passes_run += 1
        self._run_pass()

    def _cancel_timer(self) -> None:
        handle, self._timer_handle = self._timer_handle, None
        if handle is not None and hasattr(handle, 'cancel'):
            handle.cancel()
