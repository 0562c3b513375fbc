"""
Music Player Data Models - Core data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from .errors import NetworkFailure


@dataclass(frozen=True)
class Track:
    """A single playable song from a search result."""
    id: str
    title: str
    artist: str
    cover: Optional[str] = None    # Album cover URI
    preview: Optional[str] = None  # Preview audio URI
    duration: int = 0              # Seconds

    @classmethod
    def from_api(cls, data: dict) -> 'Track':
        """Build a Track from a search API record."""
        artist = data.get('artist') or {}
        album = data.get('album') or {}
        return cls(
            id=str(data.get('id', '')),
            title=data.get('title') or '',
            artist=artist.get('name') or '',
            cover=album.get('cover') or None,
            preview=data.get('preview') or None,
            duration=int(data.get('duration') or 0),
        )


class PlaybackState(Enum):
    """Playback session states."""
    IDLE = 'idle'
    LOADING = 'loading'
    PLAYING = 'playing'
    PAUSED = 'paused'
    FAILED = 'failed'


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Read-only view of the playback session for rendering."""
    state: PlaybackState = PlaybackState.IDLE
    selected_index: int = -1
    is_playing: bool = False
    elapsed: float = 0.0
    total: float = 0.0
    display_clock: str = '00:00'
    track: Optional[Track] = None

    @property
    def progress(self) -> float:
        """Get playback progress as 0.0-1.0."""
        if self.total <= 0:
            return 0.0
        return min(1.0, self.elapsed / self.total)


@dataclass
class SearchResult:
    """Outcome of a catalog search: tracks in server order, or a failure."""
    query: str
    tracks: List[Track] = field(default_factory=list)
    error: Optional[NetworkFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AuthUser:
    """A signed-in account."""
    uid: str
    email: str
    id_token: str
    refresh_token: Optional[str] = None
    email_verified: bool = False
