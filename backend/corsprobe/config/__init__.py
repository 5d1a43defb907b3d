# backend/corsprobe/config/__init__.py
from __future__ import annotations

"""
Shortcut imports for configuration.
"""

from .settings import Settings, configure_logging, get_settings  # noqa: F401
