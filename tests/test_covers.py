"""
Tests for CoverCache - download, crop, LRU eviction, failure caching.
"""
import pytest
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import requests
from PIL import Image

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from musicplayer.ui.covers import CoverCache


def png_response(width=300, height=200):
    buf = BytesIO()
    Image.new('RGB', (width, height), (200, 30, 30)).save(buf, format='PNG')
    resp = MagicMock()
    resp.content = buf.getvalue()
    resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def cache():
    cache = CoverCache(size=64, max_size=2)
    cache.session = MagicMock()
    return cache


class TestCoverCache:

    def test_fetch_crops_to_square(self, cache):
        """Downloaded covers are cropped and resized to the cache size."""
        cache.session.get.return_value = png_response()

        img = cache.fetch('http://img/a.jpg')

        assert img.size == (64, 64)
        assert cache.get('http://img/a.jpg') is img

    def test_failed_download_is_remembered(self, cache):
        """Failed URLs are not retried this session."""
        cache.session.get.side_effect = requests.ConnectionError('offline')

        assert cache.fetch('http://img/broken.jpg') is None
        assert cache.get('http://img/broken.jpg') is None
        assert cache.session.get.call_count == 1

    def test_undecodable_image(self, cache):
        """Garbage bytes are treated as a failed download."""
        resp = MagicMock()
        resp.content = b'not an image'
        cache.session.get.return_value = resp

        assert cache.fetch('http://img/garbage.jpg') is None

    def test_lru_eviction(self, cache):
        """Oldest covers are evicted beyond max_size."""
        cache.session.get.return_value = png_response()
        cache.fetch('http://img/1.jpg')
        cache.fetch('http://img/2.jpg')
        cache.get('http://img/1.jpg')  # Touch 1 so 2 is oldest
        cache._access_times['http://img/2.jpg'] = 0
        cache.fetch('http://img/3.jpg')

        assert set(cache.cache) == {'http://img/1.jpg', 'http://img/3.jpg'}

    def test_get_without_url(self, cache):
        assert cache.get(None) is None
        cache.session.get.assert_not_called()

    def test_preload_blocks_duplicate_download(self, cache, monkeypatch):
        """A cover being preloaded is not downloaded again by get()."""
        started = []
        monkeypatch.setattr(cache, '_download', started.append)

        def fake_get(url, timeout):
            assert url in cache.loading
            assert cache.get(url) is None
            return png_response()

        cache.session.get.side_effect = fake_get
        cache._preload_worker(['http://img/a.jpg'])

        assert started == []
        assert cache.session.get.call_count == 1
        assert 'http://img/a.jpg' not in cache.loading
        assert cache.get('http://img/a.jpg') is not None
