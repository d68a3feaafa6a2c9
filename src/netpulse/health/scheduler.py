"""
Poll scheduler for network monitor.

Runs a job once at startup and then on a fixed interval in a background
thread.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Fixed-interval background scheduler.

    Runs are serialized on the scheduler thread. When a run overruns one or
    more tick deadlines, those ticks are skipped rather than queued.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        interval: float = 30.0,
        name: str = "poll-scheduler",
    ):
        """
        Initialize scheduler.

        Args:
            job: Callable to run on every tick
            interval: Seconds between tick deadlines
            name: Thread name
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.job = job
        self.interval = interval
        self.name = name

        self.cycles_run = 0
        self.cycles_skipped = 0
        self.last_error: Optional[BaseException] = None

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """
        Start the scheduler thread; the first run happens immediately.

        Raises:
            RuntimeError: If a previous stop() is still waiting on a cycle
        """
        if self._thread and self._thread.is_alive():
            if self._stop_event.is_set():
                raise RuntimeError("Scheduler is still stopping; retry after stop()")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Starting scheduler with {self.interval}s interval")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """
        Stop the scheduler and wait for the current run to finish.

        If the run outlives ``timeout`` the thread is kept, so is_running
        stays True and start() will not launch a second loop beside it.
        """
        self._stop_event.set()
        if self._thread is None:
            return
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

        if self._thread.is_alive():
            logger.warning(
                f"Scheduler thread still finishing a cycle after {timeout}s"
            )
            return

        self._thread = None
        logger.info("Scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler thread is alive."""
        return bool(self._thread and self._thread.is_alive())

    def run_once(self) -> None:
        """Run the job once, logging any exception with its traceback."""
        try:
            self.job()
            self.last_error = None
        except Exception as e:
            self.last_error = e
            logger.exception("Error during scheduled poll cycle")
        finally:
            self.cycles_run += 1

    def _run(self) -> None:
        next_tick = time.monotonic()

        while not self._stop_event.is_set():
            self.run_once()

            next_tick += self.interval
            now = time.monotonic()
            if now >= next_tick:
                missed = int((now - next_tick) // self.interval) + 1
                self.cycles_skipped += missed
                next_tick += missed * self.interval
                logger.warning(
                    f"Poll cycle overran the {self.interval}s interval; "
                    f"skipped {missed} tick(s)"
                )

            self._stop_event.wait(next_tick - time.monotonic())
