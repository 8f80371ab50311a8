"""
Configuration package for the gate-pass tracker.

Environment settings and logging setup.
"""

from gatepass.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
