"""
Progress Poller - Periodic position sampling while a track plays.
"""
import logging
import threading
from typing import Callable, Optional

from ..config import POLL_INTERVAL

logger = logging.getLogger(__name__)


class ProgressPoller:
    """Posts a sampling callback onto the control loop every interval.

    The thread never touches session state itself: it only calls post(),
    and the control thread runs the callback.
    """

    def __init__(self, post: Callable, interval: float = POLL_INTERVAL):
        """
        Args:
            post: Funnel onto the control thread (ControlLoop.post)
            interval: Seconds between samples
        """
        self._post = post
        self.interval = interval
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, callback: Callable[[], None]):
        """Start (or restart) polling with callback."""
        self.stop()
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(callback, stop_event), daemon=True
        )
        self._thread.start()
        logger.debug(f'Progress polling started ({self.interval * 1000:.0f}ms)')

    def stop(self):
        """Stop polling immediately. Safe to call when not running."""
        if self._stop_event is not None and not self._stop_event.is_set():
            self._stop_event.set()
            logger.debug('Progress polling stopped')
        self._thread = None

    def _run(self, callback: Callable[[], None], stop_event: threading.Event):
        # wait() returns True as soon as stop() is called
        while not stop_event.wait(self.interval):
            self._post(callback)
