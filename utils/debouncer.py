"""
Debouncer for bursty input such as typing into the filter field.
"""
import threading
from typing import Any, Callable, Optional


Scheduler = Callable[[int, Callable[[], None]], Any]
Canceller = Callable[[Any], None]


def _timer_schedule(delay_ms: int, action: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_ms / 1000, action)
    timer.daemon = True
    timer.start()
    return timer


def _timer_cancel(timer: threading.Timer):
    timer.cancel()


class Debouncer:
    """
    Delay an action until calls stop arriving for delay_ms.

    Each call cancels the previously scheduled action, so only the last one
    runs. Tk widgets pass ``widget.after`` / ``widget.after_cancel`` so the
    action runs on the UI thread; without them a daemon ``threading.Timer``
    is used.
    """

    def __init__(self,
                 delay_ms: int,
                 schedule: Optional[Scheduler] = None,
                 cancel: Optional[Canceller] = None):
        self.delay_ms = delay_ms
        self._schedule = schedule or _timer_schedule
        self._cancel = cancel or _timer_cancel
        self._pending: Any = None
        self._lock = threading.Lock()

    def debounce(self, action: Callable[[], None]):
        """Schedule action, replacing any pending one."""
        def run():
            with self._lock:
                self._pending = None
            action()

        with self._lock:
            if self._pending is not None:
                self._cancel(self._pending)
            self._pending = self._schedule(self.delay_ms, run)

    def cancel(self):
        """Drop the pending action, if any."""
        with self._lock:
            if self._pending is not None:
                self._cancel(self._pending)
                self._pending = None

    def is_pending(self) -> bool:
        with self._lock:
            return self._pending is not None
