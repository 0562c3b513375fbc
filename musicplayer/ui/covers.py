"""
Cover Cache - Downloads and caches album cover images in memory.
"""
import time
import logging
import threading
from io import BytesIO
from typing import Dict, Iterable, Optional

import requests
from PIL import Image, ImageOps

from ..models import Track
from ..config import COVER_SIZE, COVER_CACHE_MAX_SIZE

logger = logging.getLogger(__name__)


class CoverCache:
    """Album covers as square PIL images, LRU-evicted, never written to disk."""

    def __init__(self, size: int = COVER_SIZE, max_size: int = COVER_CACHE_MAX_SIZE):
        self.size = size
        self.max_size = max_size
        self.session = requests.Session()
        self.cache: Dict[str, Image.Image] = {}
        self._access_times: Dict[str, float] = {}  # Track last access for LRU eviction
        self._failed: set = set()  # URLs that could not be fetched this session
        self.loading: set = set()
        self._lock = threading.Lock()

    def get(self, url: Optional[str]) -> Optional[Image.Image]:
        """Get a cached cover, or start a background download and return None."""
        if not url:
            return None

        with self._lock:
            if url in self.cache:
                self._access_times[url] = time.time()
                return self.cache[url]
            if url in self._failed or url in self.loading:
                return None
            self.loading.add(url)

        threading.Thread(target=self._download, args=(url,), daemon=True).start()
        return None

    def fetch(self, url: str) -> Optional[Image.Image]:
        """Download, crop and cache a cover synchronously."""
        try:
            resp = self.session.get(url, timeout=10)
            resp.raise_for_status()
            img = Image.open(BytesIO(resp.content))
            img = ImageOps.fit(img.convert('RGB'), (self.size, self.size), Image.Resampling.LANCZOS)
        except (requests.RequestException, OSError) as e:
            logger.warning(f'Error downloading cover {url[:60]}: {e}')
            with self._lock:
                self._failed.add(url)
            return None

        with self._lock:
            self.cache[url] = img
            self._access_times[url] = time.time()
            self._evict_if_needed()
        return img

    def preload(self, tracks: Iterable[Track]):
        """Fetch covers for a result list in a background thread."""
        urls = []
        seen = set()
        for track in tracks:
            if track.cover and track.cover not in seen:
                seen.add(track.cover)
                urls.append(track.cover)
        if not urls:
            return

        thread = threading.Thread(target=self._preload_worker, args=(urls,), daemon=True)
        thread.start()
        logger.info(f'Pre-loading {len(urls)} covers...')

    def _preload_worker(self, urls):
        loaded = 0
        for url in urls:
            with self._lock:
                if url in self.cache or url in self._failed or url in self.loading:
                    continue
                self.loading.add(url)
            try:
                if self.fetch(url) is not None:
                    loaded += 1
            finally:
                with self._lock:
                    self.loading.discard(url)
        logger.info(f'Pre-loaded {loaded} covers')

    def _download(self, url: str):
        try:
            self.fetch(url)
        finally:
            with self._lock:
                self.loading.discard(url)

    def _evict_if_needed(self):
        """Evict least recently used entries (caller holds the lock)."""
        if len(self.cache) <= self.max_size:
            return
        oldest = sorted(self.cache, key=lambda key: self._access_times.get(key, 0))
        for key in oldest[:len(self.cache) - self.max_size]:
            del self.cache[key]
            self._access_times.pop(key, None)
        logger.debug(f'Evicted covers, {len(self.cache)} cached')
