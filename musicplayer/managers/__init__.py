"""
Music Player Managers - Timers and background behavior.
"""
from .progress import ProgressPoller
from .search import SearchDebouncer

__all__ = ['ProgressPoller', 'SearchDebouncer']
