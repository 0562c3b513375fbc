"""
Media Engine - Audio playback adapters driven by the playback controller.

The controller only talks to the MediaEngine interface, so it can run against
pygame's mixer, the simulated engine in mock mode, or a fake in tests.
"""
import os
import time
import logging
import threading
from io import BytesIO
from concurrent.futures import Future
from typing import Optional
from urllib.parse import urlparse

import pygame
import requests

from ..config import MEDIA_TIMEOUT, MOCK_CLIP_LENGTH

logger = logging.getLogger(__name__)


class MediaEngine:
    """Playback primitives consumed by PlaybackController."""

    def load(self, uri: Optional[str]) -> Future:
        """Start loading uri. The future resolves to None when ready, or fails."""
        raise NotImplementedError

    def play(self):
        raise NotImplementedError

    def pause(self):
        raise NotImplementedError

    def stop(self):
        raise NotImplementedError

    def seek_to(self, seconds: float):
        raise NotImplementedError

    def get_position(self) -> float:
        raise NotImplementedError

    def is_playing(self) -> bool:
        raise NotImplementedError

    def release(self):
        pass


class PygameMediaEngine(MediaEngine):
    """pygame.mixer.music backend. Previews are downloaded into memory."""

    def __init__(self):
        if not pygame.mixer.get_init():
            pygame.mixer.init()
        self.session = requests.Session()
        self._lock = threading.Lock()       # Guards engine state; held only briefly
        self._load_lock = threading.Lock()  # Serializes decoder setup
        self._load_id = 0
        self._offset = 0.0   # Stream position at _base_ms
        self._base_ms = 0    # get_pos() value matching _offset
        self._loaded = False
        self._paused = False

    def load(self, uri: Optional[str]) -> Future:
        future: Future = Future()
        with self._lock:
            self._load_id += 1
            load_id = self._load_id
            self._loaded = False

        if not uri:
            future.set_exception(ValueError('Track has no preview'))
            return future

        threading.Thread(
            target=self._load_worker, args=(uri, load_id, future), daemon=True
        ).start()
        return future

    def _superseded(self, load_id: int) -> bool:
        with self._lock:
            return load_id != self._load_id

    def _load_worker(self, uri: str, load_id: int, future: Future):
        """Download and open the preview; skip the mixer if superseded."""
        try:
            resp = self.session.get(uri, timeout=MEDIA_TIMEOUT)
            resp.raise_for_status()
            data = BytesIO(resp.content)
            with self._load_lock:
                if self._superseded(load_id):
                    logger.debug(f'Load {load_id} superseded, dropping {uri[:50]}')
                    future.set_exception(RuntimeError('Load superseded'))
                    return
                pygame.mixer.music.load(data, _format_hint(uri))
                with self._lock:
                    if load_id != self._load_id:
                        logger.debug(f'Load {load_id} superseded after decode')
                        future.set_exception(RuntimeError('Load superseded'))
                        return
                    self._loaded = True
                    self._offset = 0.0
                    self._base_ms = 0
                    self._paused = False
            logger.info(f'Loaded preview {uri[:50]}')
            future.set_result(None)
        except (requests.RequestException, pygame.error) as e:
            logger.warning(f'Could not load preview {uri[:50]}: {e}')
            future.set_exception(e)
        except Exception as e:
            logger.error(f'Unexpected error loading {uri[:50]}: {e}', exc_info=True)
            future.set_exception(e)

    def play(self):
        with self._lock:
            if not self._loaded:
                return
            if self._paused:
                # get_pos() keeps counting from the last play(), not from unpause()
                pygame.mixer.music.unpause()
            else:
                pygame.mixer.music.play(start=self._offset)
                self._base_ms = 0
            self._paused = False

    def pause(self):
        with self._lock:
            if self._loaded and not self._paused:
                self._offset = self._position()
                self._base_ms = max(0, pygame.mixer.music.get_pos())
                pygame.mixer.music.pause()
                self._paused = True

    def stop(self):
        with self._lock:
            self._load_id += 1  # Cancels any in-flight download
            if self._loaded:
                pygame.mixer.music.stop()
                pygame.mixer.music.unload()
            self._loaded = False
            self._paused = False
            self._offset = 0.0
            self._base_ms = 0

    def seek_to(self, seconds: float):
        with self._lock:
            if not self._loaded:
                return
            # play() restarts get_pos() from 0
            self._offset = max(0.0, seconds)
            self._base_ms = 0
            pygame.mixer.music.play(start=self._offset)
            if self._paused:
                pygame.mixer.music.pause()

    def get_position(self) -> float:
        with self._lock:
            return self._position()

    def _position(self) -> float:
        if not self._loaded:
            return 0.0
        if self._paused:
            return self._offset
        ms = pygame.mixer.music.get_pos()
        if ms < 0:
            return self._offset
        return self._offset + max(0, ms - self._base_ms) / 1000.0

    def is_playing(self) -> bool:
        with self._lock:
            return self._loaded and not self._paused and pygame.mixer.music.get_busy()

    def release(self):
        self.stop()
        pygame.mixer.quit()
        self.session.close()
        logger.info('Media engine released')


def _format_hint(uri: str) -> str:
    """File extension of the URI for the decoder; previews are mp3 by default."""
    ext = os.path.splitext(urlparse(uri).path)[1].lstrip('.').lower()
    return ext or 'mp3'


class NullMediaEngine(MediaEngine):
    """Simulated engine for mock mode: clips play against the wall clock."""

    def __init__(self, clip_length: float = MOCK_CLIP_LENGTH):
        self.clip_length = clip_length
        self._loaded = False
        self._started_at: Optional[float] = None
        self._offset = 0.0

    def load(self, uri: Optional[str]) -> Future:
        future: Future = Future()
        self.stop()
        if not uri:
            future.set_exception(ValueError('Track has no preview'))
        else:
            self._loaded = True
            future.set_result(None)
        return future

    def play(self):
        if self._loaded and self._started_at is None:
            self._started_at = time.monotonic()

    def pause(self):
        if self._started_at is not None:
            self._offset = self.get_position()
            self._started_at = None

    def stop(self):
        self._loaded = False
        self._started_at = None
        self._offset = 0.0

    def seek_to(self, seconds: float):
        playing = self._started_at is not None
        self._offset = min(max(0.0, seconds), self.clip_length)
        self._started_at = time.monotonic() if playing else None

    def get_position(self) -> float:
        if self._started_at is None:
            return self._offset
        return min(self.clip_length, self._offset + time.monotonic() - self._started_at)

    def is_playing(self) -> bool:
        return self._started_at is not None and self.get_position() < self.clip_length
