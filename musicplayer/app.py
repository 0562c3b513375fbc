"""
Music Player Application - Main application class.

A deliberately plain pygame window: a search line, the result list and a
now-playing line. All session state lives in PlaybackController; this class
only forwards key presses and renders snapshots.
"""
import signal
import logging
from typing import Dict, List, Optional

import pygame

from .config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, COLORS,
    SEARCH_URL, SEARCH_API_KEY, SEARCH_API_HOST,
    MOCK_MODE, DEFAULT_QUERY,
    FONT_SIZE, LINE_HEIGHT, LIST_TOP, PLAYER_HEIGHT, COVER_SIZE,
    SEEK_STEP, FPS,
)
from .models import Track, PlaybackState, SearchResult
from .api import CatalogClient, NullCatalogClient
from .controllers import PlaybackController, PygameMediaEngine, NullMediaEngine
from .managers import SearchDebouncer
from .errors import OutOfRange, error_message
from .ui import CoverCache
from .utils import ControlLoop, run_async

logger = logging.getLogger(__name__)


class MusicApp:
    """Main music player application."""

    def __init__(self, fullscreen: bool = False):
        pygame.init()
        pygame.display.set_caption('Music Player')

        self._init_display(fullscreen)
        self._init_components()

    def _init_display(self, fullscreen: bool):
        flags = pygame.FULLSCREEN if fullscreen else 0
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), flags)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, FONT_SIZE)
        self.font_large = pygame.font.Font(None, FONT_SIZE + 8)

    def _init_components(self):
        """Initialize all application components."""
        self.mock_mode = MOCK_MODE

        self.loop = ControlLoop()
        self.catalog = NullCatalogClient() if self.mock_mode else CatalogClient(
            SEARCH_URL, SEARCH_API_KEY, SEARCH_API_HOST
        )
        engine = NullMediaEngine() if self.mock_mode else PygameMediaEngine()
        self.controller = PlaybackController(
            engine,
            post=self.loop.post,
            on_error=self._on_playback_error,
        )
        self.debouncer = SearchDebouncer()
        self.covers = CoverCache()
        self._cover_surfaces: Dict[str, pygame.Surface] = {}

        # View state
        self.tracks: List[Track] = []
        self.query = ''
        self.cursor = 0
        self.searching = False
        self.message: Optional[str] = None
        self._search_generation = 0
        self.running = True

        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

    def _handle_signal(self, signum, frame):
        """Handle SIGTERM/SIGINT for graceful shutdown."""
        sig_name = 'SIGTERM' if signum == signal.SIGTERM else 'SIGINT'
        logger.info(f'Received {sig_name}, shutting down...')
        self.running = False

    @property
    def player_open(self) -> bool:
        return self.controller.selected_index >= 0

    def start(self):
        """Start the application."""
        logger.info('Starting Music Player...')
        if self.mock_mode:
            logger.info('Running in MOCK MODE')

        pygame.key.start_text_input()
        self.search(DEFAULT_QUERY)

        logger.info('Entering main loop...')
        try:
            while self.running:
                self._handle_events()
                self.loop.drain()

                query = self.debouncer.check()
                if query:
                    self.search(query)

                self._draw()
                pygame.display.flip()
                self.clock.tick(FPS)
        finally:
            self._shutdown()

    def _shutdown(self):
        logger.info('Shutting down...')
        self.controller.release()
        pygame.quit()

    # ============================================
    # SEARCH
    # ============================================

    def search(self, query: str):
        """Run a search in the background; only the newest result is applied."""
        query = query.strip()
        if not query:
            return
        self._search_generation += 1
        self.searching = True
        self.debouncer.mark_issued(query)
        run_async(self._search_worker, query, self._search_generation)

    def _search_worker(self, query: str, generation: int):
        result = self.catalog.search(query)
        self.loop.post(self._on_search_done, generation, result)

    def _on_search_done(self, generation: int, result: SearchResult):
        if generation != self._search_generation:
            logger.debug(f'Dropping stale search result for {result.query!r}')
            return

        self.searching = False
        if not result.ok:
            # Keep the previous list; retyping the query retries it
            self.message = error_message(result.error)
            self.debouncer.reset_issued()
            return

        self.message = None if result.tracks else 'No songs found'
        self.tracks = result.tracks
        self.cursor = 0
        self.controller.on_track_list_replaced(self.tracks)
        self._cover_surfaces.clear()
        self.covers.preload(self.tracks)

    # ============================================
    # INPUT
    # ============================================

    def _handle_events(self):
        """Handle pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key, event.mod)
            elif event.type == pygame.TEXTINPUT:
                self._handle_text(event.text)

    def _handle_text(self, text: str):
        # Space is play/pause while the player is open
        if text == ' ' and self.player_open:
            return
        self.query += text
        self.debouncer.update(self.query)

    def _handle_key(self, key, mod=0):
        """Handle keyboard input."""
        shift = bool(mod & pygame.KMOD_SHIFT)

        if key == pygame.K_ESCAPE:
            if self.player_open:
                self.controller.close()
            else:
                self.running = False
        elif key == pygame.K_BACKSPACE:
            self.query = self.query[:-1]
            self.debouncer.update(self.query)
        elif key == pygame.K_UP:
            self.cursor = max(0, self.cursor - 1)
        elif key == pygame.K_DOWN:
            self.cursor = min(max(0, len(self.tracks) - 1), self.cursor + 1)
        elif key == pygame.K_RETURN:
            self._select(self.cursor)
        elif key == pygame.K_SPACE and self.player_open:
            self.controller.toggle_play_pause()
        elif key == pygame.K_LEFT:
            if shift:
                self.controller.seek(self.controller.elapsed_seconds - SEEK_STEP)
            else:
                self.controller.previous()
        elif key == pygame.K_RIGHT:
            if shift:
                self.controller.seek(self.controller.elapsed_seconds + SEEK_STEP)
            else:
                self.controller.next()

    def _select(self, index: int):
        try:
            self.controller.select_track(index)
            self.message = None
        except OutOfRange as e:
            logger.info(str(e))
            self.message = error_message(e)

    def _on_playback_error(self, error: Exception):
        self.message = error_message(error)

    # ============================================
    # DRAWING
    # ============================================

    def _draw(self):
        self.screen.fill(COLORS['bg_primary'])
        snapshot = self.controller.snapshot()

        prompt = f'Search: {self.query}_'
        if self.searching:
            prompt += '  (searching...)'
        self._text(prompt, (16, 16), COLORS['text_primary'])

        list_bottom = SCREEN_HEIGHT - PLAYER_HEIGHT if self.player_open else SCREEN_HEIGHT
        visible = max(1, (list_bottom - LIST_TOP) // LINE_HEIGHT)
        first = max(0, min(self.cursor - visible // 2, len(self.tracks) - visible))

        for row, index in enumerate(range(first, min(len(self.tracks), first + visible))):
            track = self.tracks[index]
            if index == snapshot.selected_index:
                color = COLORS['accent']
            elif index == self.cursor:
                color = COLORS['text_primary']
            else:
                color = COLORS['text_secondary']
            marker = '>' if index == self.cursor else ' '
            self._text(f'{marker} {track.title} - {track.artist}', (16, LIST_TOP + row * LINE_HEIGHT), color)

        if self.message:
            self._text(self.message, (16, list_bottom - LINE_HEIGHT), COLORS['error'])

        if snapshot.track:
            self._draw_player(snapshot, list_bottom)

    def _draw_player(self, snapshot, top: int):
        pygame.draw.rect(self.screen, COLORS['bg_elevated'], (0, top, SCREEN_WIDTH, PLAYER_HEIGHT))
        x = 16
        cover = self._cover_surface(snapshot.track.cover)
        if cover:
            self.screen.blit(cover, (x, top + 16))
        x += COVER_SIZE + 16

        status = {
            PlaybackState.LOADING: 'Loading...',
            PlaybackState.PLAYING: 'Playing',
            PlaybackState.PAUSED: 'Paused',
            PlaybackState.FAILED: 'Failed',
        }.get(snapshot.state, '')
        self._text(snapshot.track.title, (x, top + 20), COLORS['text_primary'], self.font_large)
        self._text(snapshot.track.artist, (x, top + 52), COLORS['text_secondary'])
        self._text(f'{snapshot.display_clock} / {snapshot.total:.1f}  {status}', (x, top + 84), COLORS['text_muted'])

        bar_width = SCREEN_WIDTH - x - 16
        pygame.draw.rect(self.screen, COLORS['text_muted'], (x, top + 116, bar_width, 4))
        pygame.draw.rect(self.screen, COLORS['accent'], (x, top + 116, int(bar_width * snapshot.progress), 4))

    def _cover_surface(self, url: Optional[str]) -> Optional[pygame.Surface]:
        if not url:
            return None
        surface = self._cover_surfaces.get(url)
        if surface is None:
            img = self.covers.get(url)
            if img is None:
                return None
            surface = pygame.image.frombytes(img.tobytes(), img.size, img.mode)
            self._cover_surfaces[url] = surface
        return surface

    def _text(self, text: str, pos, color, font=None):
        surface = (font or self.font).render(text, True, color)
        self.screen.blit(surface, pos)
