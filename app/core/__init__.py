"""
Core module initialization.
Exports configuration, logging and security utilities.
"""

from app.core.config import get_settings, Settings, EnvironmentMode
from app.core.security import TokenService

__all__ = ["get_settings", "Settings", "EnvironmentMode", "TokenService"]
