import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class DebouncedWriter:
    """Runs ``write`` once activity settles.

    Each ``schedule()`` cancels the pending timer and starts a new one, so a
    burst of changes produces a single write of whatever state exists when
    the timer finally fires. A failed write is logged and dropped; the next
    change schedules a fresh attempt.
    """

    def __init__(
        self,
        write: Callable[[], None],
        delay: float = 1.5,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self._write = write
        self._delay = float(delay)
        self._timer_factory = timer_factory
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._generation += 1

    def flush(self) -> None:
        """Write immediately if a write is pending."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._run()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        try:
            self._write()
        except Exception:
            logger.exception("Debounced write failed, dropping it")
