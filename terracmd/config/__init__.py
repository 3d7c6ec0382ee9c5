"""
Configuration management for terracmd.

This module handles defaults, the persistent settings file, and the
resolved ApiSettings passed to every API operation.
"""

from .settings import Settings, ApiSettings
from .defaults import DEFAULT_SETTINGS

__all__ = ["Settings", "ApiSettings", "DEFAULT_SETTINGS"]
