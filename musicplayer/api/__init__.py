"""
Music Player API modules - External service integrations.
"""
from .catalog import CatalogClient, NullCatalogClient
from .auth import AuthClient, validate_email

__all__ = ['CatalogClient', 'NullCatalogClient', 'AuthClient', 'validate_email']
