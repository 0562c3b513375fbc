"""
Music Player Configuration - All constants and settings.
"""
import os
import sys
from pathlib import Path

# ============================================
# WINDOW & DISPLAY
# ============================================

SCREEN_WIDTH = 480
SCREEN_HEIGHT = 800

# ============================================
# NETWORK ENDPOINTS
# ============================================

# Track search (Deezer via RapidAPI)
SEARCH_URL = os.environ.get(
    'MUSICPLAYER_SEARCH_URL', 'https://deezerdevs-deezer.p.rapidapi.com/search'
)
SEARCH_API_KEY = os.environ.get('MUSICPLAYER_API_KEY', '')
SEARCH_API_HOST = os.environ.get('MUSICPLAYER_API_HOST', 'deezerdevs-deezer.p.rapidapi.com')

# Email/password accounts (Identity Toolkit REST API)
AUTH_URL = os.environ.get('MUSICPLAYER_AUTH_URL', 'https://identitytoolkit.googleapis.com/v1')
AUTH_API_KEY = os.environ.get('MUSICPLAYER_AUTH_KEY', '')

SEARCH_TIMEOUT = 10
AUTH_TIMEOUT = 10
MEDIA_TIMEOUT = 15  # Preview download

DEFAULT_QUERY = 'top hits'

# ============================================
# PATHS
# ============================================

# Logging directory
LOG_DIR = Path.home() / 'musicplayer' / 'logs'
LOG_FILE = LOG_DIR / 'musicplayer.log'
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB per file
LOG_BACKUP_COUNT = 5

# ============================================
# COMMAND LINE FLAGS
# ============================================

MOCK_MODE = '--mock' in sys.argv or '-m' in sys.argv
FULLSCREEN = '--fullscreen' in sys.argv or '-f' in sys.argv

# ============================================
# COLORS
# ============================================

COLORS = {
    'bg_primary': (13, 13, 13),
    'bg_elevated': (40, 40, 40),
    'accent': (189, 101, 252),
    'text_primary': (255, 255, 255),
    'text_secondary': (160, 160, 160),
    'text_muted': (96, 96, 96),
    'error': (232, 80, 80),
}

# ============================================
# LAYOUT
# ============================================

LINE_HEIGHT = 28
FONT_SIZE = 22
LIST_TOP = 60
PLAYER_HEIGHT = 180
COVER_SIZE = 120

# ============================================
# TIMING
# ============================================

POLL_INTERVAL = 0.1      # Position polling while playing (seconds)
SEARCH_DEBOUNCE = 0.5    # Wait after last keystroke before searching
SEEK_STEP = 5.0          # Seconds per seek key press
FPS = 30

# ============================================
# MOCK MODE
# ============================================

MOCK_CLIP_LENGTH = 30.0  # Simulated preview length

# ============================================
# PERFORMANCE
# ============================================

COVER_CACHE_MAX_SIZE = 100  # Maximum cached cover images
