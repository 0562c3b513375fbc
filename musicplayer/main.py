#!/usr/bin/env python3
"""
Music Player - Search and play track previews

Usage:
    python -m musicplayer              # Windowed
    python -m musicplayer --fullscreen # Fullscreen
    python -m musicplayer --mock       # Mock mode (offline catalog, simulated audio)

Environment:
    MUSICPLAYER_API_KEY         Search API key
    MUSICPLAYER_AUTH_KEY        Account API key (enables sign-in)
    MUSICPLAYER_EMAIL / _PASSWORD  Credentials used at startup
"""
import os
import sys
import logging
import platform
from logging.handlers import RotatingFileHandler

from .config import (
    SEARCH_URL, AUTH_API_KEY, MOCK_MODE, FULLSCREEN,
    LOG_DIR, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
)
from .api import AuthClient
from .errors import MusicPlayerError, error_message


def setup_logging():
    """Configure logging with console and rotating file handler."""
    level_name = os.environ.get('MUSICPLAYER_LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    console_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    file_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(console_formatter)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(min(level, logging.DEBUG))
    root.addHandler(console)

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        root.addHandler(file_handler)
        root.info(f'Logging to: {LOG_FILE}')
    except OSError as e:
        root.warning(f'Could not create log file: {e}')

    # Quiet down noisy libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)


def log_system_info(logger: logging.Logger):
    """Log system information at startup."""
    logger.info('=' * 50)
    logger.info('MUSIC PLAYER STARTUP')
    logger.info('=' * 50)
    logger.info(f'Python: {sys.version.split()[0]}')
    logger.info(f'Platform: {platform.system()} {platform.release()}')
    if MOCK_MODE:
        logger.info('Mode: MOCK (offline)')
    else:
        logger.info(f'Search: {SEARCH_URL}')
    logger.info(f'Fullscreen: {FULLSCREEN}')
    logger.info('=' * 50)


def sign_in(logger: logging.Logger) -> bool:
    """Sign in when accounts are configured. Returns False if access is denied."""
    if MOCK_MODE or not AUTH_API_KEY:
        logger.info('Accounts not configured, skipping sign-in')
        return True

    auth = AuthClient(AUTH_API_KEY)
    email = os.environ.get('MUSICPLAYER_EMAIL', '')
    password = os.environ.get('MUSICPLAYER_PASSWORD', '')
    try:
        user = auth.sign_in(email, password)
    except MusicPlayerError as e:
        logger.error(error_message(e))
        return False

    logger.info(f'Welcome, {user.email}')
    return True


def main():
    """Entry point for the music player."""
    setup_logging()

    logger = logging.getLogger(__name__)
    log_system_info(logger)

    if not sign_in(logger):
        sys.exit(1)

    print()
    print('Controls:')
    print('   type        Search')
    print('   ↑ ↓ Enter   Choose and play a track')
    print('   Space       Play/Pause')
    print('   ← →         Previous / next track')
    print('   Shift ← →   Seek')
    print('   Esc         Close player / quit')
    print()

    # pygame is only needed once we get this far
    from .app import MusicApp

    app = MusicApp(fullscreen=FULLSCREEN)
    app.start()


if __name__ == '__main__':
    main()
