"""
Debounced callbacks.

A Debouncer delays its callback until calls stop arriving for a quiet
period; each call cancels the pending one and restarts the delay, so a
burst of calls runs the callback once with the last arguments.

Scheduling is pluggable. The default schedules on the running asyncio
loop (the Textual app's loop); ManualScheduler is driven by hand and is
what one-shot CLI commands and tests use.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Schedule on the running event loop.

    Raises:
        RuntimeError: If called outside a running event loop
    """
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass
class _ManualHandle:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Scheduler driven by explicit ``advance`` calls instead of a clock."""

    now: float = 0.0
    _handles: List[_ManualHandle] = field(default_factory=list)

    def __call__(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(due=self.now + delay, callback=callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward and run every callback that came due.

        Returns:
            Number of callbacks run
        """
        self.now += seconds
        due = [h for h in self._handles if not h.cancelled and h.due <= self.now]
        self._handles = [h for h in self._handles if not h.cancelled and h.due > self.now]
        for handle in sorted(due, key=lambda h: h.due):
            handle.callback()
        return len(due)


class Debouncer:
    """Run ``callback`` once calls have been quiet for ``delay`` seconds.

    Usage:
        save = Debouncer(0.5, lambda layout: store.save("austin", layout))
        save(layout_1)
        save(layout_2)   # replaces layout_1; one write after 0.5s
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., None],
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._scheduler: Scheduler = scheduler or asyncio_scheduler
        self._handle: Optional[Cancellable] = None
        self._args: Tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        self._args = args
        self._handle = self._scheduler(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        args, self._args = self._args, ()
        self._callback(*args)

    def flush(self) -> bool:
        """Run the pending callback now.

        Returns:
            True if a callback was pending
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._args = ()
