"""
Pytest configuration and shared fixtures for music player tests.
"""
from concurrent.futures import Future
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from musicplayer.controllers.media import MediaEngine
from musicplayer.controllers.playback import PlaybackController
from musicplayer.models import Track
from musicplayer.utils import ControlLoop


class FakeMediaEngine(MediaEngine):
    """Scripted engine: loads stay pending until the test completes them."""

    def __init__(self):
        self.calls = []
        self.loads = []  # (uri, future) in call order
        self.position = 0.0
        self.playing = False
        self.released = False

    def load(self, uri):
        self.calls.append(('load', uri))
        future = Future()
        self.loads.append((uri, future))
        return future

    def complete(self, index=-1, error=None):
        """Resolve a pending load (the latest by default)."""
        _, future = self.loads[index]
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(None)

    def play(self):
        self.calls.append(('play',))
        self.playing = True

    def pause(self):
        self.calls.append(('pause',))
        self.playing = False

    def stop(self):
        self.calls.append(('stop',))
        self.playing = False

    def seek_to(self, seconds):
        self.calls.append(('seek_to', seconds))
        self.position = seconds

    def get_position(self):
        return self.position

    def is_playing(self):
        return self.playing

    def release(self):
        self.released = True

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


class FakePoller:
    """Stands in for ProgressPoller; the test fires the callback by hand."""

    def __init__(self):
        self.running = False
        self.callback = None
        self.starts = 0

    def start(self, callback):
        self.running = True
        self.callback = callback
        self.starts += 1

    def stop(self):
        self.running = False


@pytest.fixture
def tracks():
    """Three tracks: A (30s), B (40s), C (200s)."""
    return [
        Track(id='a', title='Song A', artist='Artist A', cover='http://img/a.jpg',
              preview='http://cdn/a.mp3', duration=30),
        Track(id='b', title='Song B', artist='Artist B', cover='http://img/b.jpg',
              preview='http://cdn/b.mp3', duration=40),
        Track(id='c', title='Song C', artist='Artist C', cover=None,
              preview='http://cdn/c.mp3', duration=200),
    ]


@pytest.fixture
def engine():
    return FakeMediaEngine()


@pytest.fixture
def poller():
    return FakePoller()


@pytest.fixture
def loop():
    return ControlLoop()


@pytest.fixture
def errors():
    """Collects errors reported through on_error."""
    return []


@pytest.fixture
def controller(engine, loop, poller, tracks, errors):
    """Controller over the fake engine with the three-track list loaded."""
    ctrl = PlaybackController(engine, post=loop.post, poller=poller, on_error=errors.append)
    ctrl.on_track_list_replaced(tracks)
    return ctrl


@pytest.fixture
def start_track(controller, engine, loop):
    """Select a track and let its load complete."""
    def start(index):
        controller.select_track(index)
        engine.complete()
        loop.drain()
        return controller
    return start


@pytest.fixture
def sample_search_payload():
    """Search API response with two tracks."""
    return {
        'data': [
            {
                'id': 3135556,
                'title': 'Harder, Better, Faster, Stronger',
                'duration': 224,
                'preview': 'https://cdn.example/preview/1.mp3',
                'artist': {'id': 27, 'name': 'Daft Punk'},
                'album': {'id': 302127, 'cover': 'https://img.example/cover/1.jpg'},
            },
            {
                'id': 916424,
                'title': 'Without Me',
                'duration': 290,
                'preview': 'https://cdn.example/preview/2.mp3',
                'artist': {'id': 13, 'name': 'Eminem'},
                'album': {'id': 103248, 'cover': 'https://img.example/cover/2.jpg'},
            },
        ],
        'total': 2,
    }
