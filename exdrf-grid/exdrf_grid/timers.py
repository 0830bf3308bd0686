"""Cancellable delayed calls used to debounce user input.

All schedulers share the same contract: scheduling a call under a key that
already has a pending call cancels the previous one, so only the last call
scheduled for a key can ever run.
"""

import asyncio
import heapq
import itertools
import logging
import threading
from typing import Callable, Dict, Hashable, List, Optional, Protocol, Tuple

from attrs import define, field

logger = logging.getLogger(__name__)
VERBOSE = 10

Callback = Callable[[], None]


class Scheduler(Protocol):
    """Protocol for objects that run a callback after a delay."""

    def schedule(self, key: Hashable, delay: float, fn: Callback) -> None:
        """Run `fn` after `delay` seconds, replacing any pending call
        scheduled under the same key.
        """
        ...

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending call for a key.

        Returns:
            True if a pending call was cancelled.
        """
        ...

    def cancel_all(self) -> None:
        """Cancel every pending call."""
        ...

    def pending(self, key: Hashable) -> bool:
        """Tell if a call is pending for the key."""
        ...


@define
class ManualScheduler:
    """A scheduler driven by a virtual clock.

    Nothing runs until `advance()` moves the clock past the due time of a
    call. Calls run in due-time order; calls with the same due time run in
    the order in which they were scheduled.

    Attributes:
        now: The current time of the virtual clock, in seconds.
    """

    now: float = field(default=0.0)
    _queue: List[Tuple[float, int, Hashable]] = field(factory=list, init=False)
    _calls: Dict[Hashable, Tuple[int, Callback]] = field(
        factory=dict, init=False
    )
    _counter: "itertools.count[int]" = field(
        factory=itertools.count, init=False
    )

    def schedule(self, key: Hashable, delay: float, fn: Callback) -> None:
        seq = next(self._counter)
        self._calls[key] = (seq, fn)
        heapq.heappush(self._queue, (self.now + max(0.0, delay), seq, key))
        logger.log(VERBOSE, "Scheduled %r at %s", key, self.now + delay)

    def cancel(self, key: Hashable) -> bool:
        return self._calls.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._calls.clear()
        self._queue.clear()

    def pending(self, key: Hashable) -> bool:
        return key in self._calls

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run the calls that became due.

        Args:
            seconds: How much to move the clock.

        Returns:
            The number of calls that were executed.
        """
        target = self.now + max(0.0, seconds)
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            due, seq, key = heapq.heappop(self._queue)
            entry = self._calls.get(key)

            # Entries replaced by a later call are stale.
            if entry is None or entry[0] != seq:
                continue
            del self._calls[key]
            self.now = due
            entry[1]()
            executed += 1
        self.now = target
        return executed


@define
class ThreadingScheduler:
    """A scheduler that uses one `threading.Timer` per key.

    The callback runs on the timer thread; the receiver is responsible for
    serialising it with the rest of its state changes.
    """

    _timers: Dict[Hashable, threading.Timer] = field(factory=dict, init=False)
    _lock: threading.Lock = field(factory=threading.Lock, init=False)

    def schedule(self, key: Hashable, delay: float, fn: Callback) -> None:
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous.cancel()
            timer = threading.Timer(
                max(0.0, delay), self._fire, args=(key, fn)
            )
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _fire(self, key: Hashable, fn: Callback) -> None:
        with self._lock:
            timer = self._timers.get(key)
            if timer is None or timer is not threading.current_thread():
                return
            del self._timers[key]
        try:
            fn()
        except Exception:
            logger.exception("Scheduled call %r failed", key)

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._timers


@define
class AsyncioScheduler:
    """A scheduler for hosts that run an asyncio event loop.

    The callbacks run on the loop thread, interleaved with the other events
    of the host.

    Attributes:
        loop: The loop to use; the running loop is looked up on first use
            when not provided.
    """

    loop: Optional[asyncio.AbstractEventLoop] = field(default=None)
    _handles: Dict[Hashable, asyncio.TimerHandle] = field(
        factory=dict, init=False
    )

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        return self.loop

    def schedule(self, key: Hashable, delay: float, fn: Callback) -> None:
        self.cancel(key)
        self._handles[key] = self._get_loop().call_later(
            max(0.0, delay), self._fire, key, fn
        )

    def _fire(self, key: Hashable, fn: Callback) -> None:
        self._handles.pop(key, None)
        fn()

    def cancel(self, key: Hashable) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def pending(self, key: Hashable) -> bool:
        return key in self._handles
