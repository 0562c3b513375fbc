"""
Catalog Client - Track search over the remote search API.
"""
import logging
from typing import List

import requests

from ..models import Track, SearchResult
from ..errors import NetworkFailure
from ..config import SEARCH_TIMEOUT

logger = logging.getLogger(__name__)


class CatalogClient:
    """REST client for the track search endpoint.

    Never raises: failures come back as an empty SearchResult carrying
    a NetworkFailure.
    """

    def __init__(self, base_url: str, api_key: str = '', api_host: str = ''):
        self.base_url = base_url
        self.session = requests.Session()
        if api_key:
            self.session.headers['X-RapidAPI-Key'] = api_key
        if api_host:
            self.session.headers['X-RapidAPI-Host'] = api_host

    def search(self, query: str) -> SearchResult:
        """Search tracks by free text. Blank queries issue no request."""
        query = (query or '').strip()
        if not query:
            return SearchResult(query=query)

        try:
            resp = self.session.get(self.base_url, params={'q': query}, timeout=SEARCH_TIMEOUT)
        except requests.RequestException as e:
            logger.warning(f'Search request failed for {query!r}: {e}')
            return SearchResult(query=query, error=NetworkFailure(str(e)))

        if not resp.ok:
            logger.warning(f'Search failed: {resp.status_code} {resp.text[:200]}')
            return SearchResult(
                query=query,
                error=NetworkFailure(f'Search returned HTTP {resp.status_code}', status=resp.status_code),
            )

        try:
            tracks = self._parse(resp.json())
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f'Invalid search response for {query!r}: {e}', exc_info=True)
            return SearchResult(query=query, error=NetworkFailure(f'Invalid search response: {e}'))

        logger.info(f'Search {query!r}: {len(tracks)} tracks')
        return SearchResult(query=query, tracks=tracks)

    @staticmethod
    def _parse(payload) -> List[Track]:
        """Extract tracks from {'data': [...]} in server order."""
        if not isinstance(payload, dict):
            raise TypeError(f'expected object, got {type(payload).__name__}')
        if 'error' in payload and 'data' not in payload:
            raise ValueError(f'API error: {payload["error"]}')
        records = payload.get('data') or []
        if not isinstance(records, list):
            raise TypeError('data is not a list')
        return [Track.from_api(record) for record in records if isinstance(record, dict)]


class NullCatalogClient:
    """Offline catalog for mock mode (UI testing)."""

    TRACKS = [
        Track(id='1', title='Mock Song One', artist='Mock Artist', preview='mock://1', duration=30),
        Track(id='2', title='Mock Song Two', artist='Mock Artist', preview='mock://2', duration=25),
        Track(id='3', title='Another Tune', artist='Test Band', preview='mock://3', duration=40),
        Track(id='4', title='Broken Preview', artist='Test Band', preview=None, duration=30),
    ]

    def search(self, query: str) -> SearchResult:
        query = (query or '').strip()
        if not query:
            return SearchResult(query=query)
        if query.lower() in ('top hits', '*'):
            return SearchResult(query=query, tracks=list(self.TRACKS))
        needle = query.lower()
        tracks = [
            t for t in self.TRACKS
            if needle in t.title.lower() or needle in t.artist.lower()
        ]
        return SearchResult(query=query, tracks=tracks)
