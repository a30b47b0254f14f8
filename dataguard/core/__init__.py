"""
Core DataGuard service and configuration.
"""

from .config import Config
from .guard import DataGuard

__all__ = [
    "Config",
    "DataGuard",
]
