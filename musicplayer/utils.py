"""
Music Player Utilities - Shared helper functions.
"""
import queue
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


def run_async(fn, *args):
    """Fire-and-forget async execution in daemon thread.

    Wraps function to catch and log exceptions.
    """
    def wrapper():
        try:
            fn(*args)
        except Exception as e:
            logger.warning(f'Async task {fn.__name__} failed: {e}', exc_info=True)

    threading.Thread(target=wrapper, daemon=True).start()


def format_clock(seconds: float) -> str:
    """Format seconds as mm:ss."""
    total = max(0, int(seconds))
    minutes, remaining = divmod(total, 60)
    return f'{minutes:02d}:{remaining:02d}'


class ControlLoop:
    """
    Queue of callbacks to run on the control thread.

    Background threads (media loads, position polling, searches) call post();
    the main loop calls drain() once per frame, so session state is only ever
    mutated from one thread.
    """

    def __init__(self):
        self._queue: 'queue.Queue[tuple]' = queue.Queue()

    def post(self, fn: Callable, *args):
        """Queue fn(*args) for the control thread. Safe from any thread."""
        self._queue.put((fn, args))

    def drain(self) -> int:
        """Run all queued callbacks in order. Returns how many ran."""
        count = 0
        while True:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                return count
            try:
                fn(*args)
            except Exception as e:
                logger.error(f'Control callback {getattr(fn, "__name__", fn)} failed: {e}', exc_info=True)
            count += 1

    @property
    def pending(self) -> int:
        return self._queue.qsize()
