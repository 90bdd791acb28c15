# plpgen/api/__init__.py
"""
API module - All route handlers.
"""
from . import health, telegram, vip

__all__ = [
    "health",
    "telegram",
    "vip",
]
