# plpgen/core/exceptions.py
"""
Custom exceptions for the application.
"""
from typing import Optional, Dict, Any


class PlpGenError(Exception):
    """Base exception for all plpgen errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TemplateFetchError(PlpGenError):
    """Template source unset, unreachable, or answered with a non-success status."""
    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(message, {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code


class FormatError(PlpGenError):
    """Template archive or its descriptor cannot be used."""
    def __init__(self, message: str, entry: Optional[str] = None):
        super().__init__(message, {"entry": entry})
        self.entry = entry


class TelegramError(PlpGenError):
    """Bot API call rejected."""
    def __init__(self, method: str, message: str):
        super().__init__(
            f"{method} failed: {message}",
            {"method": method}
        )
        self.method = method


class StoreError(PlpGenError):
    """Key-value backend failure."""
    pass
