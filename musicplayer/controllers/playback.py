"""
Playback Controller - Owns the playback session.

The only component that commands the media engine. Tracks which song is
selected, whether it is playing, and where the read head is; handles
next/previous, seeking and auto-advance at the end of a track.

States:
- IDLE: nothing selected (selected_index == -1)
- LOADING: engine is opening the selected track's preview
- PLAYING / PAUSED
- FAILED: preview could not be opened; selection kept so the UI can show it

All methods must be called on the control thread. Engine completions and
position samples arrive via `post` (ControlLoop.post).
"""
import logging
from concurrent.futures import Future
from typing import Callable, List, Optional, Sequence

from .media import MediaEngine
from ..models import Track, PlaybackState, PlaybackSnapshot
from ..errors import OutOfRange, PlaybackLoadFailed
from ..managers.progress import ProgressPoller
from ..utils import format_clock
from ..config import POLL_INTERVAL

logger = logging.getLogger(__name__)


class PlaybackController:
    """Playback session state machine over a MediaEngine."""

    def __init__(
        self,
        engine: MediaEngine,
        post: Optional[Callable] = None,
        poller: Optional[ProgressPoller] = None,
        on_change: Optional[Callable[[PlaybackSnapshot], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        poll_interval: float = POLL_INTERVAL,
    ):
        """
        Args:
            engine: Media engine adapter to drive
            post: Funnel onto the control thread; defaults to calling directly
            poller: Position poller; defaults to a ProgressPoller on `post`
            on_change: Called with a snapshot after every state change
            on_error: Called with PlaybackLoadFailed when a load fails
        """
        self.engine = engine
        self._post = post or (lambda fn, *args: fn(*args))
        self.poller = poller or ProgressPoller(self._post, poll_interval)
        self.on_change = on_change
        self.on_error = on_error

        self._tracks: Sequence[Track] = []
        self._state = PlaybackState.IDLE
        self._selected_index = -1
        self._elapsed = 0.0
        self._total = 0.0
        self._load_generation = 0
        self._pending_seek: Optional[float] = None
        self.last_error: Optional[Exception] = None

    # ============================================
    # STATE
    # ============================================

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed

    @property
    def total_seconds(self) -> float:
        return self._total

    @property
    def display_clock(self) -> str:
        return format_clock(self._elapsed)

    @property
    def tracks(self) -> Sequence[Track]:
        return self._tracks

    @property
    def current_track(self) -> Optional[Track]:
        if 0 <= self._selected_index < len(self._tracks):
            return self._tracks[self._selected_index]
        return None

    def snapshot(self) -> PlaybackSnapshot:
        """Current session state for rendering."""
        return PlaybackSnapshot(
            state=self._state,
            selected_index=self._selected_index,
            is_playing=self.is_playing,
            elapsed=self._elapsed,
            total=self._total,
            display_clock=self.display_clock,
            track=self.current_track,
        )

    # ============================================
    # INTENTS
    # ============================================

    def select_track(self, index: int):
        """Load and play the track at index. Raises OutOfRange (no-op) if invalid."""
        if not 0 <= index < len(self._tracks):
            raise OutOfRange(index, len(self._tracks))
        self._load(index)

    def toggle_play_pause(self):
        """Pause when playing, resume when paused. Ignored while loading."""
        if self._state is PlaybackState.PLAYING:
            self.engine.pause()
            self.poller.stop()
            self._set_state(PlaybackState.PAUSED)
        elif self._state is PlaybackState.PAUSED:
            if self._total > 0 and self._elapsed >= self._total:
                # Stopped at the end of the last track: play it again
                self.engine.seek_to(0)
                self._elapsed = 0.0
            self.engine.play()
            self._set_state(PlaybackState.PLAYING)
            self._start_polling()
        else:
            logger.debug(f'Toggle ignored in state {self._state.value}')

    def next(self):
        """Select the next track. No-op on the last track (no wrap)."""
        if self._selected_index < 0:
            return
        if self._selected_index + 1 < len(self._tracks):
            self._load(self._selected_index + 1)

    def previous(self):
        """Select the previous track. No-op on the first track (no wrap)."""
        if self._selected_index > 0:
            self._load(self._selected_index - 1)

    def seek(self, target: float):
        """Move the read head, clamped to [0, total]. Queued while loading."""
        if self._state in (PlaybackState.IDLE, PlaybackState.FAILED):
            return

        target = min(max(0.0, float(target)), self._total)
        self._elapsed = target

        if self._state is PlaybackState.LOADING:
            self._pending_seek = target
            logger.debug(f'Seek to {target:.1f}s queued until load completes')
        else:
            self.engine.seek_to(target)
            logger.debug(f'Seek to {target:.1f}s')
        self._notify()

    def tick(self, position: float):
        """Position update while playing. Auto-advances at the end of a track."""
        if self._state is not PlaybackState.PLAYING:
            return

        position = max(0.0, float(position))
        self._elapsed = min(position, self._total) if self._total > 0 else position

        if self._total > 0 and self._elapsed >= self._total:
            self._finish_track()
        else:
            self._notify()

    def close(self):
        """Stop playback and return to idle."""
        self.poller.stop()
        self.engine.stop()
        self._load_generation += 1  # Late load completions are discarded
        self._pending_seek = None
        self._selected_index = -1
        self._elapsed = 0.0
        self._total = 0.0
        if self._state is not PlaybackState.IDLE:
            logger.info('Playback closed')
        self._set_state(PlaybackState.IDLE)

    def on_track_list_replaced(self, new_list: List[Track]):
        """Adopt a new search result; close if the active track is gone."""
        current = self.current_track
        self._tracks = new_list

        if self._selected_index < 0:
            return

        if self._selected_index >= len(new_list) or new_list[self._selected_index] != current:
            logger.info('Track list replaced under active session, closing player')
            self.close()

    def release(self):
        """Shut down the session and the engine."""
        self.close()
        self.engine.release()

    # ============================================
    # INTERNALS
    # ============================================

    def _load(self, index: int):
        track = self._tracks[index]

        self.poller.stop()
        self.engine.stop()

        self._load_generation += 1
        generation = self._load_generation
        self._selected_index = index
        self._elapsed = 0.0
        self._total = float(track.duration)
        self._pending_seek = None
        self.last_error = None
        self._set_state(PlaybackState.LOADING)

        logger.info(f'Loading track {index}: {track.artist} - {track.title}')
        future = self.engine.load(track.preview)
        future.add_done_callback(
            lambda f: self._post(self._on_load_done, generation, f)
        )

    def _on_load_done(self, generation: int, future: Future):
        if generation != self._load_generation:
            logger.debug(f'Discarding stale load result (generation {generation})')
            return

        error = future.exception()
        if error is not None:
            failure = PlaybackLoadFailed(self._selected_index, str(error) or type(error).__name__)
            logger.warning(str(failure))
            self.last_error = failure
            self._pending_seek = None
            self._set_state(PlaybackState.FAILED)
            if self.on_error:
                self.on_error(failure)
            return

        if self._pending_seek is not None:
            self.engine.seek_to(self._pending_seek)
            self._pending_seek = None
        self.engine.play()
        self._set_state(PlaybackState.PLAYING)
        self._start_polling()

    def _start_polling(self):
        self.poller.start(self._sample_position)

    def _sample_position(self):
        """Poll callback (control thread): read the engine, feed tick()."""
        if self._state is not PlaybackState.PLAYING:
            return

        if not self.engine.is_playing():
            # Clip ended before the catalog duration (e.g. a 30s preview)
            logger.debug('Engine stopped on its own, treating as end of track')
            self._elapsed = self._total
            self._finish_track()
            return

        self.tick(self.engine.get_position())

    def _finish_track(self):
        """End of the current track: advance, or stop on the last one."""
        self.poller.stop()
        if self._selected_index + 1 < len(self._tracks):
            logger.info('Track finished, advancing')
            self._load(self._selected_index + 1)
        else:
            logger.info('Last track finished')
            self.engine.pause()
            self._elapsed = self._total
            self._set_state(PlaybackState.PAUSED)

    def _set_state(self, state: PlaybackState):
        if state is not self._state:
            logger.debug(f'Playback state: {self._state.value} -> {state.value}')
        self._state = state
        self._notify()

    def _notify(self):
        if self.on_change:
            self.on_change(self.snapshot())
