"""
Music Player - Search tracks and play their previews.
"""
__version__ = '1.0.0'
