"""
Music Player Errors - Exception hierarchy and user-facing messages.
"""
from typing import Optional


class MusicPlayerError(Exception):
    """Base exception for music player errors."""
    pass


class InvalidInput(MusicPlayerError):
    """Raised when input is rejected before any state changes."""
    pass


class OutOfRange(InvalidInput):
    """Raised when a track index is outside the current track list."""

    def __init__(self, index: int, size: int):
        super().__init__(f'Track index {index} out of range (0..{size - 1})')
        self.index = index
        self.size = size


class NetworkFailure(MusicPlayerError):
    """Raised (or reported) when a search or auth request fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PlaybackLoadFailed(MusicPlayerError):
    """Reported when the media engine cannot open a track's preview."""

    def __init__(self, index: int, reason: str):
        super().__init__(f'Could not load track {index}: {reason}')
        self.index = index
        self.reason = reason


class Unauthenticated(MusicPlayerError):
    """Raised when sign-in is denied."""
    pass


class UnverifiedAccount(Unauthenticated):
    """Raised when the account's email address has not been verified."""
    pass


def error_message(error: Exception) -> str:
    """Get user-friendly error message."""
    if isinstance(error, OutOfRange):
        return 'That track is no longer in the list.'

    if isinstance(error, InvalidInput):
        return str(error) or 'Invalid input.'

    if isinstance(error, NetworkFailure):
        return 'Network error. Check your connection and try again.'

    if isinstance(error, PlaybackLoadFailed):
        return 'Could not play this track. Select it again to retry.'

    if isinstance(error, UnverifiedAccount):
        return 'Email not verified. Please verify your email to log in.'

    if isinstance(error, Unauthenticated):
        return f'Login failed: {error}' if str(error) else 'Login failed.'

    return 'Something went wrong.'
