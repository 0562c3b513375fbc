"""
Music Player UI - Rendering support.
"""
from .covers import CoverCache

__all__ = ['CoverCache']
