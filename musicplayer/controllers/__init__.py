"""
Music Player Controllers - Playback session and media engines.
"""
from .media import MediaEngine, PygameMediaEngine, NullMediaEngine
from .playback import PlaybackController

__all__ = ['MediaEngine', 'PygameMediaEngine', 'NullMediaEngine', 'PlaybackController']
