"""
Search Debouncer - Issue a search only once typing has settled.
"""
import time
from typing import Optional

from ..config import SEARCH_DEBOUNCE


class SearchDebouncer:
    """Fire a query after it has been stable for `delay` seconds."""

    def __init__(self, delay: float = SEARCH_DEBOUNCE):
        self.delay = delay
        self.query: Optional[str] = None
        self.start_time = 0.0
        self.last_issued: Optional[str] = None

    def update(self, query: str):
        """Restart the timer for a new query. Blank queries cancel."""
        query = (query or '').strip()
        if not query:
            self.cancel()
            return
        self.query = query
        self.start_time = time.time()

    def cancel(self):
        """Cancel the timer."""
        self.query = None
        self.start_time = 0.0

    def check(self) -> Optional[str]:
        """Check if the timer expired. Returns the query to issue or None."""
        if not self.query:
            return None

        if time.time() - self.start_time < self.delay:
            return None

        result = self.query
        self.query = None
        self.start_time = 0.0
        if result == self.last_issued:
            return None
        self.last_issued = result
        return result

    def mark_issued(self, query: str):
        """Record a search issued without going through the timer."""
        self.last_issued = (query or '').strip()

    def reset_issued(self):
        """Forget the last issued query so the same text can be searched again."""
        self.last_issued = None
