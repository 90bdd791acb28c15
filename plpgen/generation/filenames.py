# plpgen/generation/filenames.py
"""
Output filenames for generated units.
"""
import re
from typing import Optional, Set

FORBIDDEN_CHARS = re.compile(r'[\\/:*?"<>|]+')
WHITESPACE = re.compile(r"\s+")

MAX_NAME_LENGTH = 80
FALLBACK_NAME = "output"


def sanitize(name: str) -> str:
    """Make a display name safe to use as a file name."""
    name = FORBIDDEN_CHARS.sub("", (name or "").strip())
    name = WHITESPACE.sub(" ", name).strip()
    if not name:
        name = FALLBACK_NAME
    return name[:MAX_NAME_LENGTH]


def allocate(full_name: str, used: Set[str], extension: str = ".plp") -> str:
    """
    Pick a unique file name for full_name and record it in used.

    Collisions get _2, _3, ... inserted before the extension.
    """
    base = sanitize(full_name)
    file_name = f"{base}{extension}"
    if file_name in used:
        n = 2
        while f"{base}_{n}{extension}" in used:
            n += 1
        file_name = f"{base}_{n}{extension}"
    used.add(file_name)
    return file_name


class FilenameAllocator:
    """Holds the used-name set for a single batch."""

    def __init__(self, extension: str = ".plp", used: Optional[Set[str]] = None):
        self.extension = extension
        self.used: Set[str] = used if used is not None else set()

    def allocate(self, full_name: str) -> str:
        return allocate(full_name, self.used, self.extension)
