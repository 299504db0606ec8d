"""
Deferred callbacks driven by the host loop.

The host calls PollingScheduler.run_due() from the same thread that
dispatches key events, so timer callbacks never run concurrently with
event handlers.
"""
import heapq
import itertools
import logging
import time

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled before it runs."""

    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        state = "cancelled" if self.cancelled else "pending"
        return f"<TimerHandle when={self.when:.3f} {state}>"


class PollingScheduler:
    """
    Runs callbacks once their due time has passed.

    Args:
        clock (callable): Returns the current time in seconds.
            Defaults to time.monotonic.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._queue = []
        self._seq = itertools.count()

    def now(self):
        return self._clock()

    def call_later(self, delay, callback):
        """
        Schedules callback to run delay seconds from now.

        Returns:
            TimerHandle: Handle that cancels the callback.
        """
        handle = TimerHandle(self.now() + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def pending(self):
        """Returns the number of scheduled, not cancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def next_due(self):
        """Returns the due time of the earliest live callback, or None."""
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    def run_due(self):
        """
        Runs every live callback whose due time has passed.

        Callbacks scheduled while this runs are left for the next call.
        A callback that raises is logged; the rest of the batch still runs.

        Returns:
            int: Number of callbacks run.
        """
        now = self.now()
        due = []
        while self._queue and self._queue[0][0] <= now:
            due.append(heapq.heappop(self._queue)[2])

        ran = 0
        for handle in due:
            # An earlier callback in this batch may have cancelled it.
            if handle.cancelled:
                continue
            handle.cancelled = True
            ran += 1
            try:
                handle.callback()
            except Exception:
                logger.exception("Scheduled callback %r failed", handle.callback)
        return ran

    def _drop_cancelled(self):
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
