# plpgen/core/__init__.py
"""
Core module - configuration, logging, and shared exceptions.
"""
from .config import settings, Settings
from .exceptions import (
    PlpGenError,
    TemplateFetchError,
    FormatError,
    TelegramError,
    StoreError,
)

__all__ = [
    "settings",
    "Settings",
    "PlpGenError",
    "TemplateFetchError",
    "FormatError",
    "TelegramError",
    "StoreError",
]
