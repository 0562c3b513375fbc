"""
Tests for the media engines and controller integration in mock mode.
"""
import time
import wave
import threading
import pytest
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

import pygame
import requests

from musicplayer.controllers import NullMediaEngine, PygameMediaEngine, PlaybackController
from musicplayer.api import NullCatalogClient
from musicplayer.models import PlaybackState
from musicplayer.utils import ControlLoop


class TestNullMediaEngine:
    """Tests for the wall-clock engine."""

    def test_load_resolves_immediately(self):
        future = NullMediaEngine().load('mock://1')
        assert future.done()
        assert future.exception() is None

    def test_load_without_uri_fails(self):
        future = NullMediaEngine().load(None)
        assert isinstance(future.exception(), ValueError)

    def test_position_advances_while_playing(self):
        engine = NullMediaEngine()
        engine.load('mock://1')
        engine.play()
        time.sleep(0.05)

        assert engine.is_playing()
        assert engine.get_position() >= 0.04

    def test_pause_holds_position(self):
        engine = NullMediaEngine()
        engine.load('mock://1')
        engine.play()
        engine.seek_to(10)
        engine.pause()
        held = engine.get_position()
        time.sleep(0.03)

        assert not engine.is_playing()
        assert engine.get_position() == held
        assert 10 <= held < 10.5

    def test_seek_clamps(self):
        engine = NullMediaEngine(clip_length=30)
        engine.load('mock://1')
        engine.seek_to(-4)
        assert engine.get_position() == 0
        engine.seek_to(99)
        assert engine.get_position() == 30

    def test_clip_ends(self):
        engine = NullMediaEngine(clip_length=0.02)
        engine.load('mock://1')
        engine.play()
        time.sleep(0.05)
        assert not engine.is_playing()

    def test_stop_unloads(self):
        engine = NullMediaEngine()
        engine.load('mock://1')
        engine.play()
        engine.stop()
        engine.play()  # Nothing loaded
        assert not engine.is_playing()
        assert engine.get_position() == 0


class TestMockSession:
    """Controller driven by the mock catalog and engine end to end."""

    def test_play_mock_tracks(self):
        loop = ControlLoop()
        controller = PlaybackController(NullMediaEngine(), post=loop.post, poll_interval=0.01)
        controller.on_track_list_replaced(NullCatalogClient().search('top hits').tracks)

        controller.select_track(0)
        loop.drain()
        assert controller.is_playing

        time.sleep(0.05)
        loop.drain()
        assert controller.elapsed_seconds > 0
        controller.close()

    def test_broken_preview_fails(self):
        loop = ControlLoop()
        errors = []
        controller = PlaybackController(NullMediaEngine(), post=loop.post, on_error=errors.append)
        tracks = NullCatalogClient().search('broken').tracks
        controller.on_track_list_replaced(tracks)

        controller.select_track(0)
        loop.drain()

        assert controller.state is PlaybackState.FAILED
        assert len(errors) == 1


def wav_response(seconds=5.0, rate=22050):
    """HTTP response carrying a silent mono WAV clip."""
    buf = BytesIO()
    with wave.open(buf, 'wb') as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(rate)
        out.writeframes(b'\x00\x00' * int(seconds * rate))
    resp = MagicMock()
    resp.content = buf.getvalue()
    resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def pygame_engine(monkeypatch):
    monkeypatch.setenv('SDL_AUDIODRIVER', 'dummy')
    try:
        engine = PygameMediaEngine()
    except pygame.error as e:
        pytest.skip(f'No audio mixer: {e}')
    engine.session = MagicMock()
    engine.session.get.return_value = wav_response()
    yield engine
    engine.release()


class TestPygameMediaEngine:
    """Tests for the pygame mixer engine against the dummy audio driver."""

    def test_load_and_play(self, pygame_engine):
        pygame_engine.load('http://cdn/a.wav').result(timeout=5)
        pygame_engine.play()
        time.sleep(0.2)

        assert pygame_engine.is_playing()
        assert 0.1 <= pygame_engine.get_position() < 0.6

    def test_resume_does_not_double_count(self, pygame_engine):
        """Time played before a pause is counted once after resuming."""
        pygame_engine.load('http://cdn/a.wav').result(timeout=5)
        pygame_engine.play()
        time.sleep(0.5)
        pygame_engine.pause()
        held = pygame_engine.get_position()
        time.sleep(0.2)

        assert not pygame_engine.is_playing()
        assert pygame_engine.get_position() == held

        pygame_engine.play()
        time.sleep(0.2)
        position = pygame_engine.get_position()

        assert held <= position < held + 0.45

    def test_repeated_pause_resume(self, pygame_engine):
        """Several pause/resume cycles do not accumulate drift."""
        pygame_engine.load('http://cdn/a.wav').result(timeout=5)
        pygame_engine.play()
        for _ in range(3):
            time.sleep(0.2)
            pygame_engine.pause()
            pygame_engine.play()
        time.sleep(0.2)

        assert pygame_engine.get_position() < 1.3

    def test_seek_while_paused_stays_paused(self, pygame_engine):
        pygame_engine.load('http://cdn/a.wav').result(timeout=5)
        pygame_engine.play()
        pygame_engine.pause()
        pygame_engine.seek_to(3.0)
        time.sleep(0.1)

        assert not pygame_engine.is_playing()
        assert pygame_engine.get_position() == 3.0

        pygame_engine.play()
        time.sleep(0.2)
        assert 3.0 <= pygame_engine.get_position() < 3.6

    def test_superseded_load_skips_mixer(self, pygame_engine, monkeypatch):
        """A download cancelled by stop() fails and never reaches the mixer."""
        release = threading.Event()
        loaded = []
        real_load = pygame.mixer.music.load

        def slow_get(url, timeout):
            release.wait(5)
            return wav_response()

        def spy_load(data, hint):
            loaded.append(hint)
            return real_load(data, hint)

        pygame_engine.session.get.side_effect = slow_get
        monkeypatch.setattr(pygame.mixer.music, 'load', spy_load)

        future = pygame_engine.load('http://cdn/old.wav')
        pygame_engine.stop()
        release.set()

        with pytest.raises(RuntimeError):
            future.result(timeout=5)
        assert loaded == []
        assert pygame_engine.get_position() == 0.0

    def test_failed_download(self, pygame_engine):
        pygame_engine.session.get.side_effect = requests.ConnectionError('offline')

        future = pygame_engine.load('http://cdn/a.wav')

        with pytest.raises(requests.ConnectionError):
            future.result(timeout=5)
        pygame_engine.play()
        assert not pygame_engine.is_playing()

    def test_load_without_uri_fails(self, pygame_engine):
        future = pygame_engine.load('')
        assert isinstance(future.exception(), ValueError)
