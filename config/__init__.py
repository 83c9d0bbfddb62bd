"""
Configuration management for the endpoint catalog.
"""

from .catalog_config import (
    CatalogSettings,
    CatalogConfiguration,
    HighlightConfig,
    ScannerConfig,
    ValidationError
)

from .env_loader import EnvLoader

__all__ = [
    'CatalogSettings',
    'CatalogConfiguration',
    'HighlightConfig',
    'ScannerConfig',
    'ValidationError',
    'EnvLoader'
]
