"""
Configuration for sculpting sessions.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
