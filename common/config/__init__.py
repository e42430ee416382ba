"""
Settings base class (pydantic-settings).
"""

from common.config.base_settings import BaseAppSettings

__all__ = ["BaseAppSettings"]
