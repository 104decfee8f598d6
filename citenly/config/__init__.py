"""
Configuration Module

Application configuration settings and utilities.
"""

from citenly.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
