from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Cancellable]


class SaveDebouncer:
    """Trailing-edge debounce: a burst of requests runs ``action`` once, after the burst.

    ``flush()`` runs a pending action immediately on the caller's thread, so
    tests never have to wait on the timer.
    """

    def __init__(
        self,
        action: Callable[[], None],
        delay: float = 0.5,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self._action = action
        self._delay = delay
        self._timer_factory = timer_factory
        self._timer: Optional[Cancellable] = None
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def request(self) -> None:
        """(Re)start the quiet period; the action runs when it elapses."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self._timer_factory(self._delay, self._fire)
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is None:
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        # One action at a time; a timer firing mid-save waits for it
        with self._run_lock:
            self._action()

    def flush(self) -> bool:
        """Run the pending action now; returns False if nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
        self._run()
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
